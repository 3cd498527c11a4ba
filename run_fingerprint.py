"""
run_fingerprint.py: one-shot AI-visibility fingerprint for a crawled business profile.

Reads a business profile (JSON, camelCase or snake_case keys), runs the full
pipeline against the configured models and prints the analysis record.

Without OPENROUTER_API_KEY the mock gateway is used, so the script also works
offline for demos.

Usage:
    python run_fingerprint.py profile.json
    python run_fingerprint.py profile.json --sequential
    python run_fingerprint.py profile.json --batch-size 3 --models openai/gpt-4-turbo,google/gemini-2.5-flash
"""

import argparse
import asyncio
import json
import logging
import sys

from fingerprint_engine.core.config import settings, validate_settings_for_production
from fingerprint_engine.core.exceptions import InputValidationError
from fingerprint_engine.core.logging import setup_logging
from fingerprint_engine.services.fingerprinter import FingerprintConfig, fingerprint

logger = logging.getLogger("run_fingerprint")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run an AI-visibility fingerprint for one business")
    parser.add_argument("profile", help="Path to business profile JSON")
    parser.add_argument("--sequential", action="store_true", help="Query one model/prompt at a time")
    parser.add_argument("--batch-size", type=int, default=None, help="Concurrent queries per wave")
    parser.add_argument("--models", default=None, help="Comma-separated model ids (overrides FINGERPRINT_MODELS)")
    parser.add_argument("--summary", action="store_true", help="Print a short summary instead of full JSON")
    return parser.parse_args(argv)


def print_summary(record: dict) -> None:
    print()
    print("=" * 60)
    print(f"  {record['businessName']} (id={record['businessId']})")
    print("=" * 60)
    print(f"  Visibility score:  {record['visibilityScore']}/100")
    print(f"  Mention rate:      {record['mentionRate']:.1f}%")
    print(f"  Sentiment score:   {record['sentimentScore']:.2f}")
    print(f"  Avg rank:          {record['avgRankPosition']}")
    print(f"  Failed queries:    {record['failedQueries']}/{record['totalQueries']}")
    print(f"  Market position:   {record['insights']['marketPosition']}")

    leaderboard = record.get("competitiveLeaderboard") or {}
    competitors = leaderboard.get("competitors") or []
    if competitors:
        print()
        print("  Top competitors:")
        for i, c in enumerate(competitors[:5], start=1):
            print(f"    {i}. {c['name']}  mentions={c['mentionCount']}  avg_pos={c['avgPosition']:.1f}")
    print()


async def main(argv: list[str]) -> int:
    args = parse_args(argv)
    setup_logging()
    validate_settings_for_production()

    with open(args.profile, encoding="utf-8") as f:
        profile = json.load(f)

    config = FingerprintConfig.from_settings(settings)
    if args.models:
        config.models = [m.strip() for m in args.models.split(",") if m.strip()]

    options = {"parallel": not args.sequential}
    if args.batch_size is not None:
        options["batchSize"] = args.batch_size

    try:
        analysis = await fingerprint(profile, options, config=config)
    except InputValidationError as e:
        logger.error("Cannot fingerprint %s: %s", args.profile, e)
        return 2

    record = analysis.to_dict()
    if args.summary:
        print_summary(record)
    else:
        print(json.dumps(record, ensure_ascii=False, indent=2))
    return 1 if analysis.total_queries and analysis.failed_queries == analysis.total_queries else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:])))
