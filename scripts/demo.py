"""
Scripted demo covering the ask and redact flows.

Usage:
    python -m scripts.demo
"""

import asyncio

from dotenv import load_dotenv
load_dotenv()

from complai.logging_config import setup_logging
from complai.orchestrator import create_orchestrator
from complai.schemas import OutputFormat


async def run(orchestrator):
    conversation_id = "demo"

    # Demo 1: Question
    print("\n\n--- DEMO 1: Ask ---")
    for question in [
        "Where can I drop off old furniture in El Prat de Llobregat?",
        "What is the capital of France?",
    ]:
        print(f"\nQ: {question}")
        result = await orchestrator.ask(question, conversation_id)
        if result.success:
            print(f"A: {result.message[:300]}")
        else:
            print(f"Failed ({result.error_kind.name}): {result.error}")

    # Demo 2: Complaint as text
    print("\n\n--- DEMO 2: Redact (json) ---")
    complaint = ("The bike lane on Carrer de Frederic Soler in El Prat de Llobregat "
                 "is blocked by parked delivery vans every morning.")
    result = await orchestrator.redact(complaint, OutputFormat.JSON, conversation_id)
    print(result.message if result.success else f"Failed: {result.error}")

    # Demo 3: Complaint as PDF
    print("\n\n--- DEMO 3: Redact (pdf) ---")
    result = await orchestrator.redact(complaint, OutputFormat.PDF, conversation_id)
    if result.success and result.document:
        with open("demo-complaint.pdf", "wb") as f:
            f.write(result.document)
        print(f"Wrote demo-complaint.pdf ({len(result.document)} bytes)")
    else:
        print(f"Failed ({result.error_kind.name}): {result.error}")


def main():
    setup_logging()
    print("=" * 60)
    print("  DEMO: Complai")
    print("=" * 60)
    asyncio.run(run(create_orchestrator()))


if __name__ == "__main__":
    main()
