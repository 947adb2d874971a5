"""Submit text or a file to a running Content Moderation Engine and wait for the verdict.

Usage:
    1. Start the server:   python -m moderation_engine.main
    2. Submit text:        python scripts/submit_and_wait.py --text "you are such a loser"
       or a file:          python scripts/submit_and_wait.py --file samples/comment.pdf
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

import httpx

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from moderation_engine.client.status_poller import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_POLL_INTERVAL,
    poll_until_terminal,
    submit_file,
    submit_text,
)


def print_result(data: dict) -> None:
    print(f"\n{'=' * 64}")
    print(f"  Submission {data['submission_id']}: {data['status'].upper()}")
    print(f"{'=' * 64}")

    if data["status"] == "error":
        print(f"  Error: {data.get('error_message')}")
        return
    if data["status"] != "completed":
        print("  Analysis is taking longer than expected. Please check results later.")
        return

    result = data["result"]
    toxicity = result["toxicity_analysis"]
    print(f"  Classification:      {result['classification']}")
    print(f"  Cyberbullying score: {result['cyberbullying_score']:.3f} ({result['cyberbullying_strategy']})")
    flagged = [name for name, hit in result["cyberbullying_categories"].items() if hit]
    print(f"  Flagged categories:  {', '.join(flagged) or 'none'}")
    if toxicity["degraded"]:
        print(f"  Toxicity scores are DEGRADED (source: {toxicity['source']})")
    for name in ("toxicity", "severe_toxicity", "insult", "threat", "identity_attack", "profanity"):
        print(f"    {name:<18} {toxicity[name]:.3f}")
    print("\n  Contextual analysis:")
    for line in result["contextual_analysis"].splitlines():
        print(f"    {line}")


async def main(args: argparse.Namespace) -> None:
    async with httpx.AsyncClient(base_url=args.base_url, timeout=httpx.Timeout(30.0)) as client:
        if args.file:
            submission_id = await submit_file(client, Path(args.file))
        else:
            submission_id = await submit_text(client, args.text)
        print(f"Submitted {submission_id}, polling every {args.interval:.0f}s ...")

        data = await poll_until_terminal(
            client, submission_id, interval=args.interval, max_attempts=args.max_attempts
        )

    if args.json:
        print(json.dumps(data, indent=2))
    else:
        print_result(data)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Submit content for moderation analysis")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--text", help="Raw text to analyze")
    source.add_argument("--file", help="Path to a .txt, .pdf, .png or .jpg file")
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"Base URL of the running server (default: {DEFAULT_BASE_URL})",
    )
    parser.add_argument("--interval", type=float, default=DEFAULT_POLL_INTERVAL)
    parser.add_argument("--max-attempts", type=int, default=DEFAULT_MAX_ATTEMPTS)
    parser.add_argument("--json", action="store_true", help="Print the raw status payload")
    asyncio.run(main(parser.parse_args()))
