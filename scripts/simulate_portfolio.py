#!/usr/bin/env python3
"""Simulate a microfinance loan portfolio and export the ledger.

This script generates synthetic borrowers, originates loans for them, plays
out their repayment histories (including late payments, penalties and
defaults), scores every active loan and writes the results to:
- JSON files (one per entity type) in the output directory, or
- the console, with --console.
"""

import argparse
import json
import logging
import sys
import time
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loan_engine.config import EngineConfig, SimulationConfig
from loan_engine.logging import setup_logging
from loan_engine.scenarios import PortfolioSimulation
from loan_engine.sinks import ConsoleSink, JsonFileSink

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Simulate a loan portfolio and export the ledger")
    parser.add_argument("--borrowers", type=int, default=100, help="Number of borrowers (default: 100)")
    parser.add_argument("--penetration", type=float, default=0.6, help="Share of borrowers with a loan")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Simulation date, YYYY-MM-DD (default: today)",
    )
    parser.add_argument("--output-dir", type=Path, default=None, help="JSON output directory")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    parser.add_argument("--console", action="store_true", help="Print records instead of writing files")
    parser.add_argument("--max-records", type=int, default=5, help="Records per entity shown with --console")
    parser.add_argument("--log-level", type=str, default=None, help="Log level (default: from LOG_LEVEL or INFO)")
    parser.add_argument("--log-format", choices=["standard", "json"], default="standard")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    config = EngineConfig.from_env()
    if args.seed is not None:
        config.seed = args.seed
    if args.log_level:
        config.log_level = args.log_level
    if args.output_dir is not None:
        config.output.json_output_dir = args.output_dir
    if args.pretty:
        config.output.pretty_json = True

    setup_logging(config.log_level, args.log_format)

    config.simulation = SimulationConfig(
        name="portfolio",
        num_borrowers=args.borrowers,
        loan_penetration=args.penetration,
        as_of=args.as_of,
    )

    logger.info("=" * 60)
    logger.info("Loan Engine - Portfolio Simulation")
    logger.info("=" * 60)
    logger.info("Borrowers: %d", args.borrowers)
    logger.info("Seed: %s", config.seed)
    logger.info("Output: %s", "console" if args.console else config.output.json_output_dir)

    start = time.perf_counter()
    simulation = PortfolioSimulation(seed=config.seed, config=config.simulation, engine_config=config)
    simulation.generate()

    if args.console:
        sink = ConsoleSink(pretty=True, max_records=args.max_records)
    else:
        sink = JsonFileSink(config.output.json_output_dir, pretty=config.output.pretty_json)
    simulation.export([sink])
    sink.close()

    elapsed = time.perf_counter() - start
    print(json.dumps(simulation.get_portfolio_summary(), indent=2))
    logger.info("Done in %.2fs", elapsed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
