#!/usr/bin/env python3
"""
Demo Runner Script

Runs sample texts through the AI-Mod moderation pipeline against the
configured inference backend and reports the per-feature results.

This script:
1. Validates each sample through the validation gate
2. Resolves the requested features
3. Runs the orchestrator for each valid sample
4. Prints the normalized results and timing summary

Usage:
    python scripts/run_demo.py                             # Run built-in samples
    python scripts/run_demo.py --feature sentiment         # Only one feature
    python scripts/run_demo.py --text "Your own text..."   # Moderate a custom text
    python scripts/run_demo.py --verbose                   # Print full JSON results
    python scripts/run_demo.py --dry-run                   # Validate samples only
"""

import argparse
import asyncio
import json
import sys
from dataclasses import dataclass, field
from pathlib import Path

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from aimod.config import configure_logging, get_moderation_config, get_settings
from aimod.exceptions import RequestValidationFailure
from aimod.schemas.moderation import ALL_FEATURES, FeatureName
from aimod.validation import validate_moderation_body

SAMPLE_TEXTS = [
    "Great article, thanks for sharing it with the community!",
    "CONGRATULATIONS!!! You have been selected to win a free cruise. Click the link now to claim your prize before it expires.",
    "The service was slow and the staff ignored us for most of the evening. I will not be coming back.",
    "short",
    (
        "The city council met on Tuesday evening to discuss the proposed changes to the "
        "downtown parking regulations. Residents raised concerns about the cost of permits "
        "and the reduced number of spaces available near the central market. Several "
        "business owners argued that the new rules would discourage visitors from shopping "
        "in the area, while others welcomed the plan to convert part of the main street into "
        "a pedestrian zone. After a long debate, the council agreed to postpone the vote until "
        "a traffic study has been completed and a public consultation has taken place over "
        "the next two months."
    ),
]


@dataclass
class DemoResults:
    """Aggregate results from a demo run."""

    total_samples: int = 0
    rejected: dict[str, int] = field(default_factory=dict)
    failed: int = 0
    succeeded: int = 0
    total_latency_ms: float = 0.0
    feature_counts: dict[str, int] = field(default_factory=dict)

    @property
    def avg_latency_ms(self) -> float:
        return self.total_latency_ms / self.succeeded if self.succeeded > 0 else 0.0


async def run_demo(
    texts: list[str],
    features: list[str],
    max_length: int | None,
    verbose: bool = False,
    dry_run: bool = False,
) -> DemoResults:
    """
    Run the samples through validation and, unless dry_run, the orchestrator.

    Args:
        texts: Sample texts to moderate
        features: Requested feature names
        max_length: Optional summary length limit
        verbose: Whether to print full JSON results
        dry_run: Validate only, do not call any model

    Returns:
        DemoResults with counts and timing
    """
    from aimod.dispatcher.handlers import close_clients, invoke
    from aimod.orchestrator import ModerationOrchestrator, resolve_features

    config = get_moderation_config()
    orchestrator = ModerationOrchestrator(invoke, config)
    results = DemoResults(total_samples=len(texts))

    print(f"\nProcessing {len(texts)} samples...")
    print("-" * 60)

    try:
        for i, text in enumerate(texts, 1):
            preview = text[:50] + ("..." if len(text) > 50 else "")
            body = {"text": text, "features": features}
            if max_length:
                body["options"] = {"maxLength": max_length}

            try:
                request = validate_moderation_body(body, config)
            except RequestValidationFailure as e:
                results.rejected[e.code] = results.rejected.get(e.code, 0) + 1
                print(f"[{i:3d}/{len(texts)}] REJECTED | {e.code:15s} | \"{preview}\"")
                continue

            if dry_run:
                print(f"[{i:3d}/{len(texts)}] VALID    | \"{preview}\"")
                continue

            try:
                outcome = await orchestrator.run(
                    request.text, resolve_features(request.features), request.options
                )
            except Exception as e:
                results.failed += 1
                print(f"[{i:3d}/{len(texts)}] FAILED   | {e}")
                continue

            results.succeeded += 1
            results.total_latency_ms += outcome.processing_time_ms
            executed = outcome.result.executed_features()
            for feature in executed:
                results.feature_counts[feature.value] = results.feature_counts.get(feature.value, 0) + 1

            print(
                f"[{i:3d}/{len(texts)}] OK       | "
                f"{', '.join(f.value for f in executed):40s} | "
                f"{outcome.processing_time_ms:.0f}ms"
            )
            if verbose:
                print(
                    json.dumps(
                        outcome.result.model_dump(mode="json", by_alias=True, exclude_none=True),
                        indent=2,
                    )
                )
    finally:
        await close_clients()

    return results


def print_report(results: DemoResults) -> None:
    """Print a formatted report of demo results."""

    print("\n" + "=" * 60)
    print("AI-MOD DEMO RESULTS")
    print("=" * 60)

    print(f"\nSamples:   {results.total_samples}")
    print(f"  Succeeded: {results.succeeded}")
    print(f"  Failed:    {results.failed}")
    print(f"  Rejected:  {sum(results.rejected.values())}")

    for code, count in sorted(results.rejected.items()):
        print(f"    {code:<18} {count:>3}")

    if results.feature_counts:
        print("\nFeatures executed:")
        for feature, count in sorted(results.feature_counts.items()):
            print(f"  {feature:<18} {count:>3}")

    print(f"\nAvg latency: {results.avg_latency_ms:.1f}ms")
    print("\n" + "=" * 60)


def main():
    """Main entry point for the demo runner."""

    parser = argparse.ArgumentParser(
        description="Run sample texts through the AI-Mod moderation pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_demo.py                              Run built-in samples
  python scripts/run_demo.py --feature classification    Only classification
  python scripts/run_demo.py --text "Buy now, limited!!"  Moderate one text
  python scripts/run_demo.py --dry-run                    Validate only
        """
    )

    parser.add_argument(
        "--feature",
        action="append",
        choices=[f.value for f in FeatureName] + [ALL_FEATURES],
        help="Feature to run (repeatable, default: all)"
    )
    parser.add_argument(
        "--text",
        action="append",
        help="Text to moderate instead of the built-in samples (repeatable)"
    )
    parser.add_argument(
        "--max-length",
        type=int,
        help="Summary length limit in characters"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print full JSON results"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate samples without calling any model"
    )

    args = parser.parse_args()

    configure_logging(get_settings())

    print("=" * 60)
    print("AI-Mod Demo Runner")
    print("=" * 60)

    texts = args.text or SAMPLE_TEXTS
    features = args.feature or [ALL_FEATURES]

    results = asyncio.run(
        run_demo(
            texts,
            features,
            args.max_length,
            verbose=args.verbose,
            dry_run=args.dry_run,
        )
    )

    print_report(results)

    sys.exit(1 if results.failed else 0)


if __name__ == "__main__":
    main()
