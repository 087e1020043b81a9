import logging
import os
from typing import Any, Dict, Optional

import numpy as np
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.concurrency import run_in_threadpool

try:
    from ..analysis.approval import ApprovalCriticalProfiler
    from ..analysis.borda import BordaScorer
    from ..analysis.distribution import PreferenceDistribution
    from ..analysis.equilibrium import ThresholdEquilibriumSimulator
    from ..analysis.monte_carlo import MonteCarloApprovalSimulator
    from ..analysis.pairwise import CondorcetResolver, PairwiseAnalyzer
    from ..analysis.parameters import EquilibriumParameters, MonteCarloParameters
    from ..analysis.rcv import RCVResolver
    from ..analysis.report import analyze_positions
    from ..data.positions import PositionSet, positions_from_params
except ImportError:
    from analysis.approval import ApprovalCriticalProfiler
    from analysis.borda import BordaScorer
    from analysis.distribution import PreferenceDistribution
    from analysis.equilibrium import ThresholdEquilibriumSimulator
    from analysis.monte_carlo import MonteCarloApprovalSimulator
    from analysis.pairwise import CondorcetResolver, PairwiseAnalyzer
    from analysis.parameters import EquilibriumParameters, MonteCarloParameters
    from analysis.rcv import RCVResolver
    from analysis.report import analyze_positions
    from data.positions import PositionSet, positions_from_params

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Spatial Electorate Analyzer",
    description="Voting rule analysis for candidates on a one-dimensional axis",
)

DEFAULT_MAX_VOTERS = 20000
DEFAULT_MAX_TRIALS = 100000
DEFAULT_SEED = 1


def convert_numpy_types(obj: Any) -> Any:
    """Convert numpy types to native Python types for JSON serialization."""
    if isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, dict):
        return {k: convert_numpy_types(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [convert_numpy_types(item) for item in obj]
    else:
        return obj


def get_limits() -> Dict[str, int]:
    """Request size limits, overridable through the environment."""
    return {
        "max_voters": int(os.environ.get("SEA_MAX_VOTERS", DEFAULT_MAX_VOTERS)),
        "max_trials": int(os.environ.get("SEA_MAX_TRIALS", DEFAULT_MAX_TRIALS)),
        "default_seed": int(os.environ.get("SEA_DEFAULT_SEED", DEFAULT_SEED)),
    }


@app.on_event("startup")
async def startup_event():
    """Initialize the application."""
    logger.info(f"Starting Spatial Electorate Analyzer with limits {get_limits()}")


@app.on_event("shutdown")
async def shutdown_event():
    """Clean up on shutdown."""
    logger.info("Shutting down Spatial Electorate Analyzer")


def get_positions(
    c1: Optional[float] = None,
    c2: Optional[float] = None,
    c3: Optional[float] = None,
    c4: Optional[float] = None,
) -> PositionSet:
    """
    Build the candidate configuration from query parameters.

    Values are clamped to [0.01, 0.99]; at least two must be given.
    """
    try:
        return positions_from_params([c1, c2, c3, c4])
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.get("/api/health")
async def health():
    return {"status": "ok"}


@app.get("/api/distribution")
async def get_distribution(positions: PositionSet = Depends(get_positions)):
    """Exact preference segments and axis regions."""
    return PreferenceDistribution(positions).to_dict()


@app.get("/api/pairwise")
async def get_pairwise(positions: PositionSet = Depends(get_positions)):
    """Head-to-head results, Condorcet winner and per-candidate matchups."""
    analyzer = PairwiseAnalyzer(PreferenceDistribution(positions))
    return {
        "pairwise": [r.to_dict() for r in analyzer.results()],
        "condorcet": CondorcetResolver(analyzer).resolve().to_dict(),
        "groups": [g.to_dict() for g in analyzer.grouped_matchups()],
    }


@app.get("/api/borda")
async def get_borda(positions: PositionSet = Depends(get_positions)):
    """Reverse Borda scores (lower is better)."""
    return BordaScorer(PreferenceDistribution(positions)).to_dict()


@app.get("/api/rcv")
async def get_rcv(positions: PositionSet = Depends(get_positions)):
    """Run ranked-choice tabulation and return its rounds."""
    resolver = RCVResolver(PreferenceDistribution(positions))
    resolver.run_rcv_tabulation()
    return {
        **resolver.to_dict(),
        "round_summary": convert_numpy_types(
            resolver.get_round_summary().to_dict("records")
        ),
    }


@app.get("/api/approval")
async def get_approval(positions: PositionSet = Depends(get_positions)):
    """Approval critical profiles, one per target candidate."""
    return ApprovalCriticalProfiler(PreferenceDistribution(positions)).to_dict()


@app.get("/api/analysis")
async def get_analysis(positions: PositionSet = Depends(get_positions)):
    """Every closed-form result for the configuration."""
    return analyze_positions(positions).to_dict()


@app.get("/api/monte-carlo")
async def get_monte_carlo(
    positions: PositionSet = Depends(get_positions),
    trials: int = Query(1000, ge=0),
    distribution: str = "uniform",
):
    """Run stochastic approval trials."""
    limits = get_limits()
    if trials > limits["max_trials"]:
        raise HTTPException(
            status_code=400,
            detail=f"At most {limits['max_trials']} trials allowed",
        )
    try:
        params = MonteCarloParameters(trials=trials, distribution=distribution)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    simulator = MonteCarloApprovalSimulator(PreferenceDistribution(positions), params)
    result = await run_in_threadpool(simulator.run)
    return result.to_dict()


@app.get("/api/equilibrium")
async def get_equilibrium(
    positions: PositionSet = Depends(get_positions),
    voters: int = Query(1000, ge=1),
    threshold: float = Query(0.3, ge=0.0),
    basic: bool = True,
    rate: float = 1.0,
    sincere: float = 0.0,
    seed: Optional[int] = None,
    include_thresholds: bool = False,
):
    """Run the threshold equilibrium simulation."""
    limits = get_limits()
    if voters > limits["max_voters"]:
        raise HTTPException(
            status_code=400,
            detail=f"At most {limits['max_voters']} voters allowed",
        )
    try:
        params = EquilibriumParameters(
            voters=voters,
            threshold=threshold,
            basic=basic,
            rate=rate,
            sincere=sincere,
            seed=limits["default_seed"] if seed is None else seed,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        simulator = ThresholdEquilibriumSimulator(positions, params)
        result = await run_in_threadpool(simulator.run)
    except Exception as e:
        logger.error(f"Error running equilibrium simulation: {e}")
        raise HTTPException(
            status_code=500, detail=f"Simulation failed: {str(e)}"
        )

    return {
        **result.to_dict(include_thresholds=include_thresholds),
        "summary": convert_numpy_types(result.to_frame().to_dict("records")),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
