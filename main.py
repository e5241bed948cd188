"""
Complai — Interactive CLI

A civic assistant for El Prat de Llobregat that:
1. Answers questions about the town and its services
2. Drafts formal complaint letters to the Ajuntament, as text or PDF

Usage:
    python main.py              # Interactive session
    python main.py --serve      # Run the HTTP API with uvicorn
"""

import argparse
import asyncio
import uuid
from datetime import datetime

from dotenv import load_dotenv

from complai.logging_config import setup_logging
from complai.orchestrator import create_orchestrator
from complai.schemas import OutputFormat

# Built-in sample complaints for quick testing
SAMPLE_COMPLAINTS = {
    "1": {
        "name": "Airport Night Noise",
        "text": """Since last month planes have been taking off over the Sant Cosme
        neighbourhood of El Prat de Llobregat after midnight, several times a
        night. Sleeping with the windows open is impossible.""",
    },
    "2": {
        "name": "Broken Street Lighting",
        "text": """Three street lights on Avinguda de la Verge de Montserrat in
        El Prat de Llobregat have been off for two weeks, and the pavement is
        completely dark in the evening.""",
    },
}


def print_result(result, output_dir: str = "."):
    """Print a ComplaintResponse, saving any PDF to disk."""
    print(f"\n{'=' * 60}")
    if result.success and result.document is not None:
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        path = f"{output_dir}/complaint-{stamp}.pdf"
        with open(path, "wb") as f:
            f.write(result.document)
        print(f"  PDF saved to {path} ({len(result.document)} bytes)")
    elif result.success:
        print(result.message)
    else:
        print(f"  ERROR [{result.error_kind.name}]: {result.error}")
        if result.message:
            print(f"\n  AI said: {result.message}")
    print(f"{'=' * 60}")


def read_multiline(prompt: str) -> str:
    print(prompt)
    lines = []
    while True:
        line = input()
        if line == "":
            break
        lines.append(line)
    return "\n".join(lines)


async def interactive_mode(orchestrator):
    """Run the interactive ask/redact loop."""
    conversation_id = str(uuid.uuid4())
    print("\n" + "=" * 60)
    print("  COMPLAI — El Prat de Llobregat civic assistant")
    print(f"  Upstream: {orchestrator.provider.provider_name}")
    print("=" * 60)

    while True:
        print("\nOptions:")
        print("  [a]    Ask a question")
        print("  [r]    Redact your own complaint")
        print("  [1-2]  Redact a sample complaint")
        print("  [q]    Quit")

        for num, sample in SAMPLE_COMPLAINTS.items():
            print(f"    {num}: {sample['name']}")

        choice = input("\nChoice: ").strip().lower()

        if choice == "q":
            print("Goodbye!")
            break

        if choice == "a":
            question = input("Question: ").strip()
            print("\nAsking...")
            result = await orchestrator.ask(question, conversation_id)
            print_result(result)
            continue

        if choice in SAMPLE_COMPLAINTS:
            complaint = SAMPLE_COMPLAINTS[choice]["text"]
            print(f"\nRedacting: {SAMPLE_COMPLAINTS[choice]['name']}")
        elif choice == "r":
            complaint = read_multiline("Describe your complaint (enter a blank line when done):")
        else:
            print("Invalid choice.")
            continue

        raw_format = input("Format [auto/json/pdf] (default auto): ").strip() or "auto"
        requested = OutputFormat.from_string(raw_format)
        if requested is None:
            print(f"Unknown format '{raw_format}'. Using auto.")
            requested = OutputFormat.AUTO

        print("\nDrafting letter...")
        result = await orchestrator.redact(complaint, requested, conversation_id)
        print_result(result)


def main():
    load_dotenv()
    setup_logging()
    parser = argparse.ArgumentParser(description="Complai civic assistant")
    parser.add_argument("--serve", action="store_true",
                        help="Run the HTTP API instead of the interactive session")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    if args.serve:
        import uvicorn
        uvicorn.run("complai.api:app", host=args.host, port=args.port)
        return

    asyncio.run(interactive_mode(create_orchestrator()))


if __name__ == "__main__":
    main()
