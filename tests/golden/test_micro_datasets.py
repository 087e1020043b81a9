"""
Golden dataset validation tests.

These tests run the closed-form evaluations against hand-computed micro
datasets to ensure algorithmic correctness on known configurations.
"""

import json
from pathlib import Path

import pytest

from analysis.distribution import format_ranking
from analysis.report import analyze_positions
from analysis.verification import ResultsVerifier
from data.positions import PositionSet

GOLDEN_DIR = Path(__file__).parent / "micro"
DATASETS = sorted(p.stem for p in GOLDEN_DIR.glob("*.json"))


def load_golden_dataset(name):
    """Load a golden dataset from JSON file."""
    with open(GOLDEN_DIR / f"{name}.json") as f:
        return json.load(f)


@pytest.fixture(params=DATASETS)
def golden(request):
    dataset = load_golden_dataset(request.param)
    positions = PositionSet.from_positions(dataset["positions"])
    return dataset["expected"], analyze_positions(positions)


@pytest.mark.golden
def test_segments(golden):
    expected, analysis = golden
    segments = {format_ranking(s.ranking): s.proportion for s in analysis.distribution}

    assert segments == pytest.approx(expected["segments"])
    assert analysis.distribution.first_choice_shares() == pytest.approx(
        expected["first_choices"]
    )


@pytest.mark.golden
def test_region_boundaries(golden):
    expected, analysis = golden
    regions = analysis.distribution.ranking_regions()

    assert [r.end for r in regions[:-1]] == pytest.approx(expected["region_ends"])


@pytest.mark.golden
def test_pairwise_and_condorcet(golden):
    expected, analysis = golden
    results = {r.matchup: r for r in analysis.pairwise}

    assert set(results) == set(expected["pairwise"])
    for matchup, outcome in expected["pairwise"].items():
        assert results[matchup].winner == outcome["winner"], matchup
        assert results[matchup].score == outcome["score"], matchup

    assert analysis.condorcet.winner == expected["condorcet"]["winner"]
    assert analysis.condorcet.wins == expected["condorcet"]["wins"]


@pytest.mark.golden
def test_borda(golden):
    expected, analysis = golden

    assert analysis.borda_scores == pytest.approx(expected["borda"]["scores"])
    assert analysis.borda_winner == expected["borda"]["winner"]


@pytest.mark.golden
def test_rcv_rounds(golden):
    expected, analysis = golden
    actual = [r.to_dict() for r in analysis.rcv_rounds]

    assert len(actual) == len(expected["rcv"]["rounds"])
    for got, want in zip(actual, expected["rcv"]["rounds"]):
        if "winner" in want:
            assert got == want
        else:
            assert got["round"] == want["round"]
            assert got["eliminated"] == want["eliminated"]
            assert got["votes"] == pytest.approx(want["votes"])

    assert analysis.rcv_winner == expected["rcv"]["winner"]


@pytest.mark.golden
def test_approval_profiles(golden):
    expected, analysis = golden
    profiles = {p.target: p for p in analysis.approval_profiles}

    for target, outcome in expected["approval"].items():
        assert profiles[target].approvals == pytest.approx(outcome["approvals"])
        assert profiles[target].winner == outcome["winner"]


@pytest.mark.golden
@pytest.mark.invariant
def test_golden_results_verify(golden):
    _, analysis = golden

    assert ResultsVerifier().verify_analysis(analysis)["verification_passed"]
