#!/usr/bin/env python3
"""
Verify the invariants of computed results for a candidate configuration.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from analysis.distribution import PreferenceDistribution  # noqa: E402
from analysis.equilibrium import ThresholdEquilibriumSimulator  # noqa: E402
from analysis.monte_carlo import MonteCarloApprovalSimulator  # noqa: E402
from analysis.parameters import (  # noqa: E402
    EquilibriumParameters,
    MonteCarloParameters,
)
from analysis.report import analyze_positions  # noqa: E402
from analysis.verification import ResultsVerifier  # noqa: E402
from data.positions import PositionSet  # noqa: E402

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Verify analysis invariants")
    parser.add_argument(
        "--positions",
        type=float,
        nargs="+",
        required=True,
        help="Candidate positions in (0, 1)",
    )
    parser.add_argument("--trials", type=int, default=200, help="Monte Carlo trials")
    parser.add_argument("--voters", type=int, default=500, help="Sampled voters")
    parser.add_argument("--seed", type=int, default=1, help="Population seed")
    parser.add_argument("--export", help="Export verification report to file")

    args = parser.parse_args()

    try:
        positions = PositionSet.from_positions(args.positions)
    except ValueError as e:
        logger.error(f"Invalid candidate configuration: {e}")
        sys.exit(1)

    verifier = ResultsVerifier()

    logger.info("=== Verifying closed-form analysis ===")
    reports = [verifier.verify_analysis(analyze_positions(positions))]

    logger.info("=== Verifying Monte Carlo simulation ===")
    monte_carlo = MonteCarloApprovalSimulator(
        PreferenceDistribution(positions), MonteCarloParameters(trials=args.trials)
    ).run()
    reports.append(verifier.verify_monte_carlo(monte_carlo))

    logger.info("=== Verifying threshold equilibrium ===")
    equilibrium = ThresholdEquilibriumSimulator(
        positions, EquilibriumParameters(voters=args.voters, seed=args.seed)
    ).run()
    reports.append(verifier.verify_equilibrium(equilibrium))

    text = "\n\n".join(verifier.generate_verification_report(r) for r in reports)
    print(text)

    if args.export:
        export_path = Path(args.export)
        with open(export_path, "w") as f:
            f.write(text)
        print(f"\n✓ Verification report exported to: {export_path}")

    if all(r["verification_passed"] for r in reports):
        print("\n🎉 Verification PASSED!")
        sys.exit(0)
    else:
        print("\n⚠️  Verification FAILED - see report above for details")
        sys.exit(1)


if __name__ == "__main__":
    main()
