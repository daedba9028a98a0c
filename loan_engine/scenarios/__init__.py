"""Scenarios that drive the engine with synthetic data."""

from loan_engine.scenarios.portfolio import PortfolioSimulation

__all__ = ["PortfolioSimulation"]
