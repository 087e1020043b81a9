"""
Unit tests for the threshold equilibrium simulation.

Single-voter populations are built directly so that proposed thresholds
can be checked against hand-computed distances.
"""

import numpy as np
import pytest

from analysis.equilibrium import SimulationStep, ThresholdEquilibriumSimulator
from analysis.parameters import STEP_CAP, EquilibriumParameters
from data.positions import PositionSet
from data.sampling import VoterPopulation


def single_voter(values, voter, **params):
    return ThresholdEquilibriumSimulator(
        PositionSet.from_positions(values),
        EquilibriumParameters(voters=1, **params),
        population=VoterPopulation(seed=1, positions=(voter,)),
    )


@pytest.mark.unit
class TestEquilibriumParameters:
    def test_defaults(self):
        params = EquilibriumParameters()

        assert params.voters == 1000
        assert params.threshold == 0.3
        assert params.basic is True
        assert params.to_dict()["seed"] == 1

    @pytest.mark.parametrize(
        "kwargs",
        [{"rate": 0.05}, {"rate": 1.5}, {"sincere": -0.1}, {"sincere": 1.1}, {"voters": 0}],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            EquilibriumParameters(**kwargs)


@pytest.mark.unit
class TestProposedThresholds:
    def test_bullet_vote_not_clamped(self):
        # Equidistant voter: C1 comes first by original order
        sim = single_voter([0.2, 0.5], 0.35)
        proposed = sim.propose_thresholds(("C1",))

        assert proposed[0] == pytest.approx(0.151)

    def test_frontrunner_inside_threshold(self):
        sim = single_voter([0.2, 0.5, 0.8], 0.45, threshold=0.3)

        assert sim.propose_thresholds(("C1",))[0] == pytest.approx(0.251)

    def test_frontrunner_outside_threshold(self):
        sim = single_voter([0.2, 0.5, 0.8], 0.75, threshold=0.3)

        assert sim.propose_thresholds(("C1",))[0] == pytest.approx(0.549)

    def test_frontrunner_is_nearest(self):
        sim = single_voter([0.2, 0.5, 0.8], 0.15, threshold=0.3)

        assert sim.propose_thresholds(("C1",))[0] == pytest.approx(0.051)

    def test_multiple_viable(self):
        sim = single_voter([0.2, 0.5, 0.8], 0.45, threshold=0.3)

        assert sim.propose_thresholds(("C1", "C3"))[0] == pytest.approx(0.251)


@pytest.mark.unit
class TestComputeStep:
    def test_empty_ballots(self):
        sim = ThresholdEquilibriumSimulator(
            PositionSet.from_positions([0.2, 0.5, 0.8]),
            EquilibriumParameters(voters=100, threshold=0.0, basic=False),
        )
        step = sim.compute_step(0, np.zeros(sim.voter_count))

        assert step.approval_counts == {"C1": 0, "C2": 0, "C3": 0}
        assert step.winner == "C1"
        assert step.viable_candidates == ("C1", "C2", "C3")
        assert step.ballot_counts == {}
        assert step.mean_ballot_size == 0.0

    def test_basic_ballots_never_empty_or_full(self, symmetric_positions):
        sim = ThresholdEquilibriumSimulator(
            symmetric_positions, EquilibriumParameters(voters=300, threshold=2.0)
        )
        step = sim.compute_step(0, np.full(sim.voter_count, 2.0))

        assert sum(step.ballot_counts.values()) == 300
        assert all(len(ballot) == 2 for ballot in step.ballot_counts)
        assert step.mean_ballot_size == pytest.approx(2.0)

    def test_step_dict(self):
        step = SimulationStep(
            step=2,
            approval_counts={"C1": 3, "C2": 1},
            winner="C1",
            viable_candidates=("C1",),
            ballot_counts={("C1",): 2, ("C2", "C1"): 1},
            mean_ballot_size=1.0,
            thresholds=(0.1, 0.2, 0.3),
        )

        data = step.to_dict()
        assert data["ballot_counts"] == {"C1": 2, "C2>C1": 1}
        assert "thresholds" not in data
        assert step.to_dict(include_thresholds=True)["thresholds"] == [0.1, 0.2, 0.3]


@pytest.mark.unit
class TestRun:
    def test_all_sincere_single_step(self, symmetric_positions):
        result = ThresholdEquilibriumSimulator(
            symmetric_positions, EquilibriumParameters(voters=200, sincere=1.0)
        ).run()

        assert len(result.steps) == 1
        assert result.converged
        assert result.steps[0].step == 0

    def test_reproducible(self, four_positions):
        params = EquilibriumParameters(voters=250, rate=0.5, sincere=0.2, seed=4)
        first = ThresholdEquilibriumSimulator(four_positions, params).run()
        second = ThresholdEquilibriumSimulator(four_positions, params).run()

        assert [s.to_dict(True) for s in first.steps] == [
            s.to_dict(True) for s in second.steps
        ]

    def test_converged_run_ends_with_identical_ballots(self, asymmetric_positions):
        result = ThresholdEquilibriumSimulator(
            asymmetric_positions, EquilibriumParameters(voters=400)
        ).run()

        assert len(result.steps) <= STEP_CAP + 1
        assert [s.step for s in result.steps] == list(range(len(result.steps)))
        if result.converged:
            assert result.steps[-1].same_ballots(result.steps[-2])
        assert result.winner == result.final_step.winner

    def test_result_frame(self, symmetric_positions):
        result = ThresholdEquilibriumSimulator(
            symmetric_positions, EquilibriumParameters(voters=150)
        ).run()
        frame = result.to_frame()

        assert len(frame) == len(result.steps)
        assert {"step", "winner", "C1", "C2", "C3"} <= set(frame.columns)
        assert result.to_dict()["params"]["voters"] == 150


def reference_ballots(sim, thresholds):
    """Per-voter ballot construction used to cross-check the encoded counts."""
    mask = sim.approval_mask(thresholds)
    ballots = {}
    for order_row, mask_row in zip(sim.order, mask):
        ballot = tuple(sim.candidate_ids[j] for j in order_row[mask_row])
        if ballot:
            ballots[ballot] = ballots.get(ballot, 0) + 1
    return ballots


@pytest.mark.unit
class TestBallotEncoding:
    @pytest.mark.parametrize("basic", [True, False])
    def test_multiset_matches_per_voter_ballots(self, four_positions, basic):
        sim = ThresholdEquilibriumSimulator(
            four_positions, EquilibriumParameters(voters=500, basic=basic, seed=2)
        )
        thresholds = np.linspace(0.0, 0.9, sim.voter_count)
        step = sim.compute_step(0, thresholds)
        expected = reference_ballots(sim, thresholds)

        assert step.ballot_counts == expected
        assert list(step.ballot_counts) == list(expected)
        for candidate_id in sim.candidate_ids:
            assert step.approval_counts[candidate_id] == sum(
                n for ballot, n in expected.items() if candidate_id in ballot
            )

    def test_codes_decode_to_each_voters_ballot(self, four_positions):
        sim = ThresholdEquilibriumSimulator(
            four_positions, EquilibriumParameters(voters=40, basic=False)
        )
        mask = sim.approval_mask(np.linspace(0.0, 1.0, sim.voter_count))
        codes = sim.ballot_codes(mask)

        for code, order_row, mask_row in zip(codes, sim.order, mask):
            assert sim.decode_ballot(int(code)) == tuple(
                sim.candidate_ids[j] for j in order_row[mask_row]
            )
        assert sim.decode_ballot(0) == ()

    def test_large_population_run(self):
        sim = ThresholdEquilibriumSimulator(
            PositionSet.from_positions([0.2, 0.45, 0.55, 0.8]),
            EquilibriumParameters(voters=20000, threshold=0.05, basic=False, seed=2),
        )
        result = sim.run()

        assert 1 < len(result.steps) <= STEP_CAP + 1
        assert all(
            sum(s.ballot_counts.values()) <= 20000 for s in result.steps
        )


@pytest.mark.unit
def test_injected_population_reported_in_params(symmetric_positions):
    population = VoterPopulation.sample(seed=6, size=120)
    sim = ThresholdEquilibriumSimulator(
        symmetric_positions,
        EquilibriumParameters(voters=200, seed=5, rate=0.5),
        population=population,
    )
    result = sim.run()

    assert result.params.seed == 6
    assert result.params.voters == 120
    assert result.params.rate == 0.5
    assert len(result.steps[0].thresholds) == 120
