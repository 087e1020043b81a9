#!/usr/bin/env python3
"""
Run the closed-form voting analysis for a candidate configuration.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from analysis.approval import ApprovalCriticalProfiler  # noqa: E402
from analysis.distribution import format_ranking  # noqa: E402
from analysis.pairwise import PairwiseAnalyzer  # noqa: E402
from analysis.rcv import RCVResolver  # noqa: E402
from analysis.report import analyze_positions  # noqa: E402
from data.positions import PositionSet  # noqa: E402

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Analyze a spatial electorate")
    parser.add_argument(
        "--positions",
        type=float,
        nargs="+",
        required=True,
        help="Candidate positions in (0, 1), named C1..C4 in order",
    )
    parser.add_argument(
        "--ids", nargs="+", help="Candidate ids (default: C1..C4)", default=None
    )
    parser.add_argument("--export", help="Export segment and round tables to CSV")

    args = parser.parse_args()

    try:
        positions = PositionSet.from_positions(args.positions, args.ids)
    except ValueError as e:
        logger.error(f"Invalid candidate configuration: {e}")
        sys.exit(1)

    analysis = analyze_positions(positions)

    print("\n=== Voter Preference Segments ===")
    for _, row in analysis.distribution.to_frame().iterrows():
        print(f"  {row['ranking']:20s}: {row['proportion'] * 100:6.2f}%")

    print("\n=== Pairwise Comparisons ===")
    for result in analysis.pairwise:
        print(f"  {result.matchup:12s}: {result.winner} wins ({result.score})")
    print(f"  Condorcet winner: {analysis.condorcet.winner}")

    print("\n=== Reverse Borda Scores (lower is better) ===")
    for candidate_id, score in sorted(
        analysis.borda_scores.items(), key=lambda item: item[1]
    ):
        print(f"  {candidate_id:6s}: {score:.4f}")

    print("\n=== Ranked-Choice Rounds ===")
    for round_obj in analysis.rcv_rounds:
        if round_obj.is_terminal:
            print(f"  Winner: {round_obj.winner}")
            continue
        tally = ", ".join(
            f"{c}={v * 100:.1f}%"
            for c, v in sorted(round_obj.vote_totals.items(), key=lambda i: -i[1])
        )
        eliminated = round_obj.eliminated or "-"
        print(f"  Round {round_obj.round_number}: {tally} (eliminated: {eliminated})")

    print("\n=== Approval Critical Profiles ===")
    for profile in analysis.approval_profiles:
        approvals = ", ".join(
            f"{c}={v * 100:.1f}%" for c, v in profile.approvals.items()
        )
        print(f"  Cutoff at {profile.target}: {approvals} -> {profile.winner}")

    if args.export:
        export_path = Path(args.export)
        distribution = analysis.distribution

        distribution.to_frame().to_csv(export_path.with_suffix(".csv"), index=False)
        print(f"\n✓ Segments exported to: {export_path.with_suffix('.csv')}")

        rounds_path = export_path.with_stem(export_path.stem + "_rounds").with_suffix(
            ".csv"
        )
        resolver = RCVResolver(distribution)
        resolver.run_rcv_tabulation()
        resolver.get_round_summary().to_csv(rounds_path, index=False)
        print(f"✓ RCV rounds exported to: {rounds_path}")

        pairwise_path = export_path.with_stem(
            export_path.stem + "_pairwise"
        ).with_suffix(".csv")
        PairwiseAnalyzer(distribution).to_frame().to_csv(pairwise_path, index=False)
        print(f"✓ Pairwise results exported to: {pairwise_path}")

        approval_path = export_path.with_stem(
            export_path.stem + "_approval"
        ).with_suffix(".csv")
        ApprovalCriticalProfiler(distribution).to_frame().to_csv(
            approval_path, index=False
        )
        print(f"✓ Approval profiles exported to: {approval_path}")

    regions = " | ".join(
        f"[{r.start:.3f}, {r.end:.3f}) {format_ranking(r.ranking)}"
        for r in analysis.distribution.ranking_regions()
    )
    logger.info(f"Axis regions: {regions}")
    print("\n✓ Analysis completed successfully")


if __name__ == "__main__":
    main()
