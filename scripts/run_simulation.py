#!/usr/bin/env python3
"""
Run the Monte Carlo approval or threshold equilibrium simulation.
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
from data.positions import PositionSet  # noqa: E402

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def run_monte_carlo(positions: PositionSet, args):
    params = MonteCarloParameters(trials=args.trials, distribution=args.distribution)
    result = MonteCarloApprovalSimulator(PreferenceDistribution(positions), params).run()

    print(f"\n=== Monte Carlo Approval ({result.trials} trials) ===")
    rates = result.win_rates
    for candidate_id, wins in sorted(result.wins.items(), key=lambda i: -i[1]):
        print(f"  {candidate_id:6s}: {wins:8d} wins ({rates[candidate_id] * 100:5.1f}%)")
    return result.to_frame()


def run_equilibrium(positions: PositionSet, args):
    params = EquilibriumParameters(
        voters=args.voters,
        threshold=args.threshold,
        basic=not args.no_basic,
        rate=args.rate,
        sincere=args.sincere,
        seed=args.seed,
    )
    result = ThresholdEquilibriumSimulator(positions, params).run()

    print(f"\n=== Threshold Equilibrium ({params.voters} voters, seed {params.seed}) ===")
    for step in result.steps:
        counts = ", ".join(f"{c}={n}" for c, n in step.approval_counts.items())
        print(
            f"  Step {step.step:2d}: {counts} | winner {step.winner} | "
            f"viable {','.join(step.viable_candidates)} | "
            f"mean ballot {step.mean_ballot_size:.2f}"
        )

    status = "converged" if result.converged else "did not converge"
    print(f"\n{status.capitalize()} after {len(result.steps) - 1} steps")
    print("Final ballots:")
    for ballot, count in sorted(
        result.final_step.ballot_counts.items(), key=lambda i: -i[1]
    ):
        print(f"  {'>'.join(ballot):15s}: {count}")
    return result.to_frame()


def main():
    parser = argparse.ArgumentParser(description="Run a voter simulation")
    parser.add_argument(
        "model", choices=["monte-carlo", "equilibrium"], help="Simulation to run"
    )
    parser.add_argument(
        "--positions",
        type=float,
        nargs="+",
        required=True,
        help="Candidate positions in (0, 1), named C1..C4 in order",
    )
    parser.add_argument("--trials", type=int, default=1000, help="Monte Carlo trials")
    parser.add_argument(
        "--distribution",
        choices=["uniform", "gaussian"],
        default="uniform",
        help="Approval probability distribution for middle candidates",
    )
    parser.add_argument("--voters", type=int, default=1000, help="Sampled voters")
    parser.add_argument(
        "--threshold", type=float, default=0.3, help="Initial approval radius"
    )
    parser.add_argument(
        "--no-basic",
        action="store_true",
        help="Disable the always-nearest/never-farthest approval rule",
    )
    parser.add_argument("--rate", type=float, default=1.0, help="Update rate")
    parser.add_argument(
        "--sincere", type=float, default=0.0, help="Proportion of sincere voters"
    )
    parser.add_argument("--seed", type=int, default=1, help="Population seed")
    parser.add_argument("--export", help="Export the result table to CSV")

    args = parser.parse_args()

    try:
        positions = PositionSet.from_positions(args.positions)
        if args.model == "monte-carlo":
            table = run_monte_carlo(positions, args)
        else:
            table = run_equilibrium(positions, args)
    except ValueError as e:
        logger.error(f"Invalid simulation input: {e}")
        sys.exit(1)

    if args.export:
        export_path = Path(args.export).with_suffix(".csv")
        table.to_csv(export_path, index=False)
        print(f"\n✓ Results exported to: {export_path}")


if __name__ == "__main__":
    main()
