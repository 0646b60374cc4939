"""Command line entry point for scoring recorded sessions."""

from __future__ import annotations

import argparse
import csv
import sys
from pathlib import Path

from fitness_assess.analysis.evaluators import evaluate
from fitness_assess.analysis.scoring import aggregate, normalize
from fitness_assess.core.config import get_settings
from fitness_assess.core.exceptions import FitnessAssessError
from fitness_assess.core.logging import get_logger, setup_logging
from fitness_assess.core.types import FitnessProfile, TestResult
from fitness_assess.session import load_session, to_calibration, to_inputs
from fitness_assess.vision.calibration import calibrate

logger = get_logger(__name__)


def score_session(path: Path) -> tuple[FitnessProfile, list[tuple[str, str]]]:
    """Evaluate every attempt in a session file.

    Args:
        path: Session document (JSON)

    Returns:
        Tuple of (profile with the latest result per test, [(test, error)] failures)
    """
    document = load_session(path)
    calibration = to_calibration(document.calibration)

    profile = FitnessProfile()
    failures: list[tuple[str, str]] = []

    for entry in document.tests:
        try:
            result = evaluate(entry.test, to_inputs(entry), calibration)
        except FitnessAssessError as e:
            failures.append((entry.test, str(e)))
            continue
        profile.record(result)

    logger.info(
        "Scored %d of %d attempts from %s",
        len(document.tests) - len(failures),
        len(document.tests),
        path,
    )
    return profile, failures


def print_results(results: list[TestResult], failures: list[tuple[str, str]]) -> None:
    """Print per-test results and the overall score."""
    print("\n" + "=" * 60)
    print("FITNESS ASSESSMENT")
    print("=" * 60)

    for result in results:
        rating = result.rating.label if result.rating else "-"
        print(
            f"{result.test_type:<22} {result.score:>8g} {result.unit:<8} "
            f"{rating:<10} {normalize(result):5.1f}"
        )

    for test, error in failures:
        print(f"{test:<22} FAILED: {error}")

    print("-" * 60)
    print(f"Overall fitness score: {aggregate(results):.1f} / 100")


def write_csv(results: list[TestResult], output: Path) -> None:
    """Write a CSV summary of results."""
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["test_type", "score", "unit", "rating", "accuracy", "normalized"])
        for r in results:
            writer.writerow(
                [
                    r.test_type,
                    r.score,
                    r.unit,
                    r.rating.label if r.rating else "",
                    r.accuracy,
                    f"{normalize(r):.2f}",
                ]
            )
    logger.info("Results saved to %s", output)


def main(argv: list[str] | None = None) -> int:
    """Run the command line interface."""
    parser = argparse.ArgumentParser(description="Score fitness test recordings")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    score_parser = subparsers.add_parser("score", help="Score a recorded session file")
    score_parser.add_argument("session", type=Path, help="Path to session JSON")
    score_parser.add_argument("--csv", type=Path, help="Output CSV for results")

    calibrate_parser = subparsers.add_parser(
        "calibrate", help="Pixels per cm from a reference object's pixel width"
    )
    calibrate_parser.add_argument("kind", help="credit_card, coin_quarter, coin_penny, ...")
    calibrate_parser.add_argument("pixel_width", type=float)
    calibrate_parser.add_argument("pixel_height", type=float, nargs="?")

    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(args.log_level or settings.logging.level, settings.logging.file)

    if args.command == "calibrate":
        try:
            px_per_cm = calibrate(
                args.kind, args.pixel_width, args.pixel_height, settings.calibration
            )
        except FitnessAssessError as e:
            logger.error("Calibration failed: %s", e)
            return 1
        print(f"{px_per_cm:.4f} px/cm")
        return 0

    try:
        profile, failures = score_session(args.session)
    except (OSError, FitnessAssessError) as e:
        logger.error("Could not score %s: %s", args.session, e)
        return 1

    results = profile.results()
    print_results(results, failures)

    if args.csv:
        write_csv(results, args.csv)

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
