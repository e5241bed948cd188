"""
Refusal Classifier — Detect replies where the model declined the topic.

A phrase-table heuristic over English, Spanish and Catalan. The table is
data: pass your own lists, or point REFUSAL_PHRASES_PATH at a JSON file
with any of the keys ``phrases``, ``scope_terms``, ``exclusivity_terms``
and ``topic_terms``.

Besides the fixed phrases, a single sentence that names the service area,
carries an "only" qualifier and talks about what the assistant covers
("I can only assist with El Prat topics") is read as a paraphrased refusal.
Letters that merely say "the only bus stop in El Prat" are not.
"""

import json
import logging
import os
import re

logger = logging.getLogger(__name__)

DEFAULT_PHRASES = (
    # English
    "can't help",
    "cannot help",
    "can not help",
    "i'm sorry, i can't",
    "i am sorry, i cannot",
    "i am unable to",
    "i'm unable to",
    "cannot provide",
    "can't provide",
    "cannot assist",
    "can't assist",
    # Spanish
    "no puedo ayudar",
    "lo siento, no puedo",
    "no puedo proporcionar",
    # Catalan
    "no puc ajudar",
    "ho sento, no puc",
    "no puc proporcionar",
)

# Mentioning the service area next to "only" is how paraphrased refusals read
DEFAULT_SCOPE_TERMS = (
    "el prat",
    "prat de llobregat",
)

DEFAULT_EXCLUSIVITY_TERMS = (
    "only",
    "solament",
    "només",
    "solo",
    "sólo",
)

# Word prefixes for the assistant describing its own remit
DEFAULT_TOPIC_TERMS = (
    # English
    "assist",
    "help",
    "topic",
    "question",
    "matter",
    "purpose",
    "related",
    # Catalan
    "ajud",
    "assistent",
    "servei",
    "tema",
    "teme",
    "pregunt",
    "consult",
    "relacionat",
    # Spanish
    "ayud",
    "asist",
    "servicio",
    "relacionad",
)

_SENTENCE_BREAK = re.compile(r"(?<=[.!?;])\s+|\n+")

_QUOTE_VARIANTS = str.maketrans({
    "‘": "'",
    "’": "'",
    "´": "'",
    "`": "'",
    "“": '"',
    "”": '"',
    "«": '"',
    "»": '"',
})


def normalize(text: str) -> str:
    """Unify quote marks, lowercase and trim."""
    return text.translate(_QUOTE_VARIANTS).lower().strip()


class RefusalClassifier:
    """Flags replies that match the refusal table."""

    def __init__(
        self,
        phrases=DEFAULT_PHRASES,
        scope_terms=DEFAULT_SCOPE_TERMS,
        exclusivity_terms=DEFAULT_EXCLUSIVITY_TERMS,
        topic_terms=DEFAULT_TOPIC_TERMS,
    ):
        self.phrases = tuple(normalize(p) for p in phrases)
        self.scope_terms = tuple(normalize(t) for t in scope_terms)
        self.exclusivity_terms = tuple(normalize(t) for t in exclusivity_terms)
        self.topic_terms = tuple(normalize(t) for t in topic_terms)
        self._exclusivity_re = None
        if self.exclusivity_terms:
            alternatives = "|".join(re.escape(t) for t in self.exclusivity_terms)
            self._exclusivity_re = re.compile(rf"\b(?:{alternatives})\b")
        self._topic_re = None
        if self.topic_terms:
            alternatives = "|".join(re.escape(t) for t in self.topic_terms)
            self._topic_re = re.compile(rf"\b(?:{alternatives})")

    @classmethod
    def from_file(cls, path: str) -> "RefusalClassifier":
        """Load a table from JSON. Missing keys keep the defaults."""
        with open(path, encoding="utf-8") as f:
            table = json.load(f)
        if not isinstance(table, dict):
            raise ValueError(f"Refusal table in {path} must be a JSON object")
        logger.info("Loaded refusal table from %s", path)
        return cls(
            phrases=table.get("phrases", DEFAULT_PHRASES),
            scope_terms=table.get("scope_terms", DEFAULT_SCOPE_TERMS),
            exclusivity_terms=table.get("exclusivity_terms", DEFAULT_EXCLUSIVITY_TERMS),
            topic_terms=table.get("topic_terms", DEFAULT_TOPIC_TERMS),
        )

    def _is_scope_sentence(self, sentence: str) -> bool:
        if not any(t in sentence for t in self.scope_terms):
            return False
        if self._exclusivity_re.search(sentence) is None:
            return False
        return self._topic_re is None or self._topic_re.search(sentence) is not None

    def is_refusal(self, text: str | None) -> bool:
        if text is None:
            return False
        normalized = normalize(text)
        if not normalized:
            return False

        if any(phrase in normalized for phrase in self.phrases):
            return True

        if self._exclusivity_re is None or not self.scope_terms:
            return False
        return any(self._is_scope_sentence(s) for s in _SENTENCE_BREAK.split(normalized))


def create_classifier() -> RefusalClassifier:
    """Build the classifier, honouring REFUSAL_PHRASES_PATH when set."""
    path = os.environ.get("REFUSAL_PHRASES_PATH")
    if path:
        return RefusalClassifier.from_file(path)
    return RefusalClassifier()


_default = RefusalClassifier()


def is_refusal(text: str | None) -> bool:
    """Classify ``text`` with the built-in table."""
    return _default.is_refusal(text)
