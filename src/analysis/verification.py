import logging
from itertools import combinations
from typing import Dict, List

import pandas as pd

from .equilibrium import EquilibriumResult
from .monte_carlo import MonteCarloResult
from .parameters import MAJORITY, STEP_CAP
from .report import SpatialAnalysis

logger = logging.getLogger(__name__)

PROPORTION_TOLERANCE = 1e-6


class ResultsVerifier:
    """
    Verifies the mathematical invariants of computed results.

    Each ``verify_*`` method returns a report dictionary with a ``checks``
    DataFrame (one row per invariant), the list of ``discrepancies`` and an
    overall ``verification_passed`` flag.
    """

    def __init__(self, tolerance: float = PROPORTION_TOLERANCE):
        """
        Initialize verifier.

        Args:
            tolerance: Allowed numeric error for proportion sums
        """
        self.tolerance = tolerance

    def _build_report(self, subject: str, checks: List[Dict]) -> Dict:
        checks_df = pd.DataFrame(checks, columns=["check", "passed", "detail"])
        discrepancies = [c["check"] for c in checks if not c["passed"]]
        if discrepancies:
            logger.warning(f"{subject}: failed checks {discrepancies}")
        else:
            logger.info(f"{subject}: all {len(checks)} checks passed")
        return {
            "subject": subject,
            "checks": checks_df,
            "discrepancies": discrepancies,
            "verification_passed": not discrepancies,
        }

    def verify_analysis(self, analysis: SpatialAnalysis) -> Dict:
        """Check distribution, pairwise, Condorcet and RCV invariants."""
        checks = []
        candidate_ids = analysis.positions.ids
        n = len(candidate_ids)

        total = analysis.distribution.total_proportion()
        checks.append(
            {
                "check": "proportions_sum_to_one",
                "passed": abs(total - 1.0) <= self.tolerance,
                "detail": f"sum={total:.8f}",
            }
        )

        rankings = [s.ranking for s in analysis.distribution]
        checks.append(
            {
                "check": "rankings_unique",
                "passed": len(rankings) == len(set(rankings)),
                "detail": f"{len(rankings)} segments",
            }
        )

        complementary = all(
            abs(r.share_a + self._share(analysis, r.b, r.a) - 1.0) <= self.tolerance
            for r in analysis.pairwise
        )
        checks.append(
            {
                "check": "pairwise_shares_complementary",
                "passed": complementary,
                "detail": f"{len(analysis.pairwise)} matchups",
            }
        )

        expected_matchups = len(list(combinations(candidate_ids, 2)))
        total_wins = sum(analysis.condorcet.wins.values())
        checks.append(
            {
                "check": "condorcet_wins_sum",
                "passed": total_wins == expected_matchups,
                "detail": f"wins={total_wins}, expected={expected_matchups}",
            }
        )

        checks.append(self._check_rcv(analysis, n))
        return self._build_report(f"Analysis of {analysis.positions}", checks)

    @staticmethod
    def _share(analysis: SpatialAnalysis, a: str, b: str) -> float:
        return sum(s.proportion for s in analysis.distribution if s.prefers(a, b))

    def _check_rcv(self, analysis: SpatialAnalysis, n: int) -> Dict:
        tally_rounds = [r for r in analysis.rcv_rounds if not r.is_terminal]
        sizes = [len(r.vote_totals) for r in tally_rounds]
        shrinking = all(b == a - 1 for a, b in zip(sizes, sizes[1:]))
        starts_full = bool(sizes) and sizes[0] == n

        terminal = analysis.rcv_rounds[-1] if analysis.rcv_rounds else None
        decided = False
        if terminal is not None and terminal.is_terminal:
            last_tally = tally_rounds[-1] if tally_rounds else None
            majority = (
                last_tally is not None
                and last_tally.eliminated is None
                and last_tally.vote_totals.get(terminal.winner, 0.0) > MAJORITY
            )
            sole_survivor = n - len(tally_rounds) == 1 and all(
                r.eliminated is not None for r in tally_rounds
            )
            decided = majority or sole_survivor

        return {
            "check": "rcv_elimination_sequence",
            "passed": starts_full and shrinking and decided,
            "detail": f"round sizes={sizes}, winner={analysis.rcv_winner}",
        }

    def verify_monte_carlo(self, result: MonteCarloResult) -> Dict:
        total = sum(result.wins.values())
        checks = [
            {
                "check": "win_counts_sum_to_trials",
                "passed": total == result.trials,
                "detail": f"sum={total}, trials={result.trials}",
            }
        ]
        return self._build_report("Monte Carlo approval simulation", checks)

    def verify_equilibrium(self, result: EquilibriumResult) -> Dict:
        steps = result.steps
        checks = [
            {
                "check": "step_cap_respected",
                "passed": len(steps) <= STEP_CAP + 1,
                "detail": f"{len(steps)} steps",
            },
            {
                "check": "steps_sequential",
                "passed": [s.step for s in steps] == list(range(len(steps))),
                "detail": "",
            },
        ]

        if result.converged and len(steps) > 1:
            stable = steps[-1].same_ballots(steps[-2])
        else:
            stable = True
        checks.append(
            {
                "check": "converged_ballots_stable",
                "passed": stable,
                "detail": f"converged={result.converged}",
            }
        )

        voters = len(steps[0].thresholds)
        counted = all(sum(s.ballot_counts.values()) <= voters for s in steps)
        checks.append(
            {
                "check": "ballots_within_population",
                "passed": counted,
                "detail": f"{voters} voters",
            }
        )
        return self._build_report("Threshold equilibrium simulation", checks)

    def generate_verification_report(self, verification_results: Dict) -> str:
        """
        Generate a human-readable verification report.

        Args:
            verification_results: Results from one of the verify methods

        Returns:
            Formatted verification report string
        """
        report = []
        report.append("=" * 60)
        report.append(f"VERIFICATION REPORT: {verification_results['subject']}")
        report.append("=" * 60)

        if verification_results["verification_passed"]:
            report.append("✅ VERIFICATION PASSED - All invariants hold")
        else:
            report.append("❌ VERIFICATION FAILED - Discrepancies found")

        report.append("")
        for _, row in verification_results["checks"].iterrows():
            mark = "✅" if row["passed"] else "❌"
            report.append(f"{mark} {row['check']}: {row['detail']}")

        if verification_results["discrepancies"]:
            report.append("")
            report.append(
                f"Failed checks: {', '.join(verification_results['discrepancies'])}"
            )

        return "\n".join(report)
