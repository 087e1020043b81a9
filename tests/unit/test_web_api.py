from unittest.mock import patch

import numpy as np
import pytest
from fastapi.testclient import TestClient

from web.main import app, convert_numpy_types, get_limits


@pytest.mark.unit
class TestWebMainConfiguration:
    """Test web application configuration and utility functions."""

    def test_default_limits(self):
        with patch.dict("os.environ", {}, clear=True):
            assert get_limits() == {
                "max_voters": 20000,
                "max_trials": 100000,
                "default_seed": 1,
            }

    @patch.dict("os.environ", {"SEA_MAX_VOTERS": "500", "SEA_DEFAULT_SEED": "9"})
    def test_limits_from_environment(self):
        limits = get_limits()

        assert limits["max_voters"] == 500
        assert limits["default_seed"] == 9

    def test_convert_numpy_types(self):
        data = {
            "count": np.int64(3),
            "share": np.float64(0.25),
            "values": [np.array([1, 2])],
        }
        converted = convert_numpy_types(data)

        assert converted == {"count": 3, "share": 0.25, "values": [[1, 2]]}
        assert type(converted["count"]) is int
        assert type(converted["share"]) is float


@pytest.mark.unit
class TestClosedFormEndpoints:
    def setup_method(self):
        self.client = TestClient(app)

    def test_health(self):
        response = self.client.get("/api/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_distribution(self):
        response = self.client.get("/api/distribution?c1=0.1&c2=0.4&c3=0.8")

        assert response.status_code == 200
        data = response.json()
        assert data["positions"] == {"C1": 0.1, "C2": 0.4, "C3": 0.8}
        shares = {">".join(s["ranking"]): s["proportion"] for s in data["segments"]}
        assert shares["C3>C2>C1"] == pytest.approx(0.4)

    def test_positions_are_clamped(self):
        response = self.client.get("/api/distribution?c1=-0.5&c2=1.5")

        assert response.status_code == 200
        assert response.json()["positions"] == {"C1": 0.01, "C2": 0.99}

    def test_unused_slots_skipped(self):
        response = self.client.get("/api/borda?c1=0.2&c3=0.6")

        assert response.status_code == 200
        assert set(response.json()["scores"]) == {"C1", "C3"}

    def test_single_candidate_rejected(self):
        response = self.client.get("/api/distribution?c1=0.5")

        assert response.status_code == 422

    def test_pairwise(self):
        response = self.client.get("/api/pairwise?c1=0.1&c2=0.4&c3=0.8")

        assert response.status_code == 200
        data = response.json()
        assert data["condorcet"]["winner"] == "C2"
        assert len(data["pairwise"]) == 3
        assert data["groups"][0]["candidate"] == "C2"

    def test_rcv(self):
        response = self.client.get("/api/rcv?c1=0.1&c2=0.4&c3=0.8")

        assert response.status_code == 200
        data = response.json()
        assert data["winner"] == "C2"
        assert data["eliminated"] == ["C1"]
        assert data["rounds"][-1] == {"round": 3, "winner": "C2"}
        assert len(data["round_summary"]) == 5

    def test_approval(self):
        response = self.client.get("/api/approval?c1=0.1&c2=0.4&c3=0.8")

        assert response.status_code == 200
        assert response.json()["C2"]["approvals"]["C2"] == pytest.approx(1.0)

    def test_analysis(self):
        response = self.client.get("/api/analysis?c1=0.1&c2=0.4&c3=0.8")

        assert response.status_code == 200
        data = response.json()
        assert data["borda"]["winner"] == "C2"
        assert data["rcv"]["winner"] == "C2"
        assert set(data["approval"]) == {"C1", "C2", "C3"}


@pytest.mark.unit
class TestSimulationEndpoints:
    def setup_method(self):
        self.client = TestClient(app)

    def test_monte_carlo(self):
        response = self.client.get(
            "/api/monte-carlo?c1=0.1&c2=0.4&c3=0.8&trials=50&distribution=gaussian"
        )

        assert response.status_code == 200
        data = response.json()
        assert sum(data["wins"].values()) == 50
        assert data["distribution"] == "gaussian"

    def test_monte_carlo_unknown_distribution(self):
        response = self.client.get(
            "/api/monte-carlo?c1=0.1&c2=0.4&trials=5&distribution=cauchy"
        )

        assert response.status_code == 422

    @patch.dict("os.environ", {"SEA_MAX_TRIALS": "10"})
    def test_monte_carlo_trial_limit(self):
        response = self.client.get("/api/monte-carlo?c1=0.1&c2=0.4&trials=11")

        assert response.status_code == 400

    def test_equilibrium(self):
        response = self.client.get(
            "/api/equilibrium?c1=0.2&c2=0.5&c3=0.8&voters=200&seed=3"
        )

        assert response.status_code == 200
        data = response.json()
        assert data["params"]["seed"] == 3
        assert data["steps"][0]["step"] == 0
        assert "thresholds" not in data["steps"][0]
        assert len(data["summary"]) == len(data["steps"])

    def test_equilibrium_thresholds_included(self):
        response = self.client.get(
            "/api/equilibrium?c1=0.2&c2=0.5&voters=20&include_thresholds=true"
        )

        assert response.status_code == 200
        assert len(response.json()["steps"][0]["thresholds"]) == 20

    @patch.dict("os.environ", {"SEA_DEFAULT_SEED": "7"})
    def test_equilibrium_default_seed(self):
        response = self.client.get("/api/equilibrium?c1=0.2&c2=0.5&voters=20")

        assert response.json()["params"]["seed"] == 7

    def test_equilibrium_deterministic(self):
        url = "/api/equilibrium?c1=0.2&c2=0.5&c3=0.7&voters=150&rate=0.5&sincere=0.3"

        assert self.client.get(url).json() == self.client.get(url).json()

    def test_equilibrium_invalid_rate(self):
        response = self.client.get("/api/equilibrium?c1=0.2&c2=0.5&voters=20&rate=0")

        assert response.status_code == 422

    @patch.dict("os.environ", {"SEA_MAX_VOTERS": "100"})
    def test_equilibrium_voter_limit(self):
        response = self.client.get("/api/equilibrium?c1=0.2&c2=0.5&voters=101")

        assert response.status_code == 400
