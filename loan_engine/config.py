"""Configuration management for loan-engine."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from pathlib import Path


@dataclass
class LedgerConfig:
    """Ledger and scoring behaviour."""

    payment_epsilon: Decimal = Decimal("0.01")
    on_time_tolerance_days: int = 5
    predicted_default_threshold: int = 70
    at_risk_threshold: int = 50
    max_identifier_retries: int = 3
    default_credit_score: int = 600


@dataclass
class PenaltyDefaults:
    """Penalty applied when a late entry is assessed without explicit config."""

    percentage: Decimal = Decimal("5")
    grace_period_days: int = 3
    tiered_base_percentage: Decimal = Decimal("5")


@dataclass
class OutputConfig:
    """Output configuration."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class SimulationConfig:
    """Configuration for portfolio simulation runs."""

    name: str
    num_borrowers: int = 100
    loan_penetration: float = 0.6
    on_time_rate: float = 0.85
    late_rate: float = 0.10
    default_rate: float = 0.05
    as_of: date | None = None


@dataclass
class EngineConfig:
    """Main configuration for loan-engine."""

    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    penalties: PenaltyDefaults = field(default_factory=PenaltyDefaults)
    output: OutputConfig = field(default_factory=OutputConfig)
    simulation: SimulationConfig | None = None
    seed: int | None = None
    log_level: str = "INFO"
    currency: str = "KES"

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create config from environment variables."""
        import os

        ledger = LedgerConfig(
            payment_epsilon=Decimal(os.getenv("PAYMENT_EPSILON", "0.01")),
            on_time_tolerance_days=int(os.getenv("ON_TIME_TOLERANCE_DAYS", "5")),
            at_risk_threshold=int(os.getenv("AT_RISK_THRESHOLD", "50")),
        )

        penalties = PenaltyDefaults(
            percentage=Decimal(os.getenv("PENALTY_PERCENTAGE", "5")),
            grace_period_days=int(os.getenv("PENALTY_GRACE_DAYS", "3")),
            tiered_base_percentage=Decimal(os.getenv("TIERED_BASE_PERCENTAGE", "5")),
        )

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        return cls(
            ledger=ledger,
            penalties=penalties,
            output=output,
            seed=int(os.getenv("SEED")) if os.getenv("SEED") else None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            currency=os.getenv("CURRENCY", "KES"),
        )
