#!/usr/bin/env python3
"""
Serve the Spatial Electorate Analyzer JSON API.

The server is stateless: every request carries its candidate positions
(c1..c4) and all results are computed on demand. Request limits come from
the SEA_MAX_VOTERS, SEA_MAX_TRIALS and SEA_DEFAULT_SEED environment
variables, which the --max-voters, --max-trials and --seed flags set.
"""

import argparse
import os
import socket
import sys
from pathlib import Path

import uvicorn

# Add src to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

LIMIT_FLAGS = {
    "max_voters": "SEA_MAX_VOTERS",
    "max_trials": "SEA_MAX_TRIALS",
    "seed": "SEA_DEFAULT_SEED",
}


def find_available_port(host, start_port, max_attempts=10):
    """Find an available port starting from start_port."""
    for port in range(start_port, start_port + max_attempts):
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
                sock.bind((host, port))
                return port
        except OSError:
            continue
    return None


def apply_limits(args, environ):
    """Export limit flags as SEA_* variables; the app reads them per request."""
    for option, variable in LIMIT_FLAGS.items():
        value = getattr(args, option)
        if value is not None:
            environ[variable] = str(value)


def build_parser():
    parser = argparse.ArgumentParser(
        description=(
            "Serve the spatial electorate JSON API (/api/analysis, "
            "/api/monte-carlo, /api/equilibrium, ...)"
        )
    )
    parser.add_argument(
        "--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--port", type=int, default=8000, help="Port to bind to (default: 8000)"
    )
    parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )
    parser.add_argument(
        "--auto-port",
        action="store_true",
        help="Try the next free port if --port is taken",
    )
    parser.add_argument(
        "--max-voters",
        type=int,
        help="Largest equilibrium population accepted (sets SEA_MAX_VOTERS)",
    )
    parser.add_argument(
        "--max-trials",
        type=int,
        help="Largest Monte Carlo trial count accepted (sets SEA_MAX_TRIALS)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Population seed used when a request omits one (sets SEA_DEFAULT_SEED)",
    )
    return parser


def main():
    args = build_parser().parse_args()

    port = args.port
    if args.auto_port:
        available_port = find_available_port(args.host, args.port)
        if available_port is None:
            print(f"Error: No available ports found starting from {args.port}")
            sys.exit(1)
        elif available_port != args.port:
            print(f"Port {args.port} is taken, using port {available_port} instead")
        port = available_port

    apply_limits(args, os.environ)

    from web.main import get_limits

    limits = get_limits()
    print("Spatial Electorate Analyzer API (stateless, no database)")
    print(f"Server: http://{args.host}:{port}/api/health")
    print(
        f"Limits: {limits['max_voters']} voters, {limits['max_trials']} trials, "
        f"default seed {limits['default_seed']}"
    )
    print("Press Ctrl+C to stop")

    uvicorn.run("web.main:app", host=args.host, port=port, reload=args.reload)


if __name__ == "__main__":
    main()
