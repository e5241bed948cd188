"""Tests for complai/conversation_store.py"""

import os
from unittest.mock import patch

import pytest

from complai.conversation_store import ConversationStore, create_conversation_store


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def msg(role, content):
    return {"role": role, "content": content}


class TestConversationStore:
    def test_unknown_and_none_ids_are_empty(self):
        store = ConversationStore()
        assert store.get("missing") == []
        assert store.get(None) == []

    def test_append_then_get(self):
        store = ConversationStore()
        store.append("c1", msg("user", "hi"), msg("assistant", "hello"))
        assert store.get("c1") == [msg("user", "hi"), msg("assistant", "hello")]

    def test_get_returns_a_copy(self):
        store = ConversationStore()
        store.append("c1", msg("user", "hi"))
        store.get("c1").append(msg("user", "sneaky"))
        store.get("c1")[0]["content"] = "changed"
        assert store.get("c1") == [msg("user", "hi")]

    def test_none_id_is_ignored(self):
        store = ConversationStore()
        store.append(None, msg("user", "hi"))
        assert len(store) == 0

    def test_keeps_newest_messages_only(self):
        store = ConversationStore(max_messages=3)
        for i in range(5):
            store.append("c1", msg("user", str(i)))
        assert [m["content"] for m in store.get("c1")] == ["2", "3", "4"]

    def test_expires_after_ttl(self):
        clock = FakeClock()
        store = ConversationStore(ttl_seconds=10, clock=clock)
        store.append("c1", msg("user", "hi"))
        clock.now += 9
        assert store.get("c1") != []
        clock.now += 10
        assert store.get("c1") == []
        assert len(store) == 0

    def test_append_refreshes_expiry(self):
        clock = FakeClock()
        store = ConversationStore(ttl_seconds=10, clock=clock)
        store.append("c1", msg("user", "1"))
        clock.now += 8
        store.append("c1", msg("user", "2"))
        clock.now += 8
        assert len(store.get("c1")) == 2

    def test_evicts_least_recently_used(self):
        store = ConversationStore(max_entries=2)
        store.append("a", msg("user", "a"))
        store.append("b", msg("user", "b"))
        store.append("a", msg("user", "a2"))
        store.append("c", msg("user", "c"))
        assert store.get("b") == []
        assert len(store.get("a")) == 2
        assert len(store) == 2

    def test_get_refreshes_expiry(self):
        clock = FakeClock()
        store = ConversationStore(ttl_seconds=10, clock=clock)
        store.append("c1", msg("user", "hi"))
        clock.now += 8
        store.get("c1")
        clock.now += 8
        assert store.get("c1") == [msg("user", "hi")]

    def test_get_counts_as_use_for_eviction(self):
        store = ConversationStore(max_entries=2)
        store.append("a", msg("user", "a"))
        store.append("b", msg("user", "b"))
        store.get("a")
        store.append("c", msg("user", "c"))
        assert store.get("b") == []
        assert store.get("a") == [msg("user", "a")]

    def test_clear(self):
        store = ConversationStore()
        store.append("a", msg("user", "a"))
        store.clear()
        assert len(store) == 0

    def test_rejects_non_positive_limits(self):
        with pytest.raises(ValueError):
            ConversationStore(max_entries=0)


class TestCreateConversationStore:
    def test_reads_env(self):
        with patch.dict(os.environ, {
            "CONVERSATION_MAX_ENTRIES": "7",
            "CONVERSATION_TTL_SECONDS": "90",
            "CONVERSATION_MAX_MESSAGES": "4",
        }):
            store = create_conversation_store()
        assert store.max_entries == 7
        assert store.ttl_seconds == 90.0
        assert store.max_messages == 4

    def test_defaults(self):
        env = {k: v for k, v in os.environ.items() if not k.startswith("CONVERSATION_")}
        with patch.dict(os.environ, env, clear=True):
            store = create_conversation_store()
        assert store.max_entries == 500
        assert store.max_messages == 20
