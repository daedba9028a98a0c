"""Portfolio simulation: synthetic borrowers run through the ledger end to end."""

from __future__ import annotations

import logging
import random
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from faker import Faker

from loan_engine.analytics.warnings import generate_warnings
from loan_engine.calculators.amortization import add_months
from loan_engine.calculators.credit import calculate_credit_report, derive_credit_factors
from loan_engine.calculators.fees import format_currency
from loan_engine.config import EngineConfig, SimulationConfig
from loan_engine.models.borrower import Borrower
from loan_engine.models.enums import FeeType, LoanStatus, PaymentMethod
from loan_engine.models.fees import FixedFee, PercentageFee
from loan_engine.models.warnings import EarlyWarning
from loan_engine.sinks.serialization import to_dict
from loan_engine.store.ledger import LoanLedger

logger = logging.getLogger(__name__)

EMPLOYMENT_STATUSES = ["EMPLOYED", "SELF_EMPLOYED", "BUSINESS_OWNER", "RETIRED", "UNEMPLOYED"]
EMPLOYMENT_WEIGHTS = [0.45, 0.25, 0.15, 0.05, 0.10]

# Annual rates offered per credit grade
RATE_BY_GRADE = {
    "A": (10, 14),
    "B": (14, 18),
    "C": (18, 22),
    "D": (22, 26),
    "E": (26, 30),
    "F": (30, 36),
}

DISBURSEMENT_FEES = [
    PercentageFee(FeeType.PROCESSING, Decimal("2"), fee_id="fee-processing", name="Processing fee"),
    FixedFee(FeeType.APPLICATION, Decimal("500"), fee_id="fee-application", name="Application fee"),
]


class PortfolioSimulation:
    """Simulate a microfinance loan book.

    This scenario creates:
    - Borrowers with Faker-generated identities, incomes and credit scores
    - Loans sized and priced from each borrower's credit report
    - Repayment histories driven by behaviour profiles:
        - on-time payers
        - late payers (penalised after the grace period)
        - defaulters who stop paying after a few installments
    - Risk scores for every active loan and the resulting early warnings
    """

    def __init__(
        self,
        num_borrowers: int = 100,
        loan_penetration: float = 0.6,
        on_time_rate: float = 0.85,
        late_rate: float = 0.10,
        default_rate: float = 0.05,
        seed: int | None = None,
        as_of: date | None = None,
        *,
        config: SimulationConfig | None = None,
        engine_config: EngineConfig | None = None,
    ) -> None:
        """Initialize the simulation.

        Parameters
        ----------
        num_borrowers : int
            Number of borrowers to generate.
        loan_penetration : float
            Share of borrowers who take a loan (0.0 to 1.0).
        on_time_rate, late_rate, default_rate : float
            Weights of the repayment behaviour profiles.
        seed : int | None
            Random seed for reproducibility.
        as_of : date | None
            Simulation date; today when None.
        config : SimulationConfig | None
            Optional simulation configuration. Overrides the keyword values.
        engine_config : EngineConfig | None
            Ledger and penalty configuration.
        """
        if config is not None:
            num_borrowers = config.num_borrowers
            loan_penetration = config.loan_penetration
            on_time_rate = config.on_time_rate
            late_rate = config.late_rate
            default_rate = config.default_rate
            as_of = config.as_of or as_of

        self.num_borrowers = num_borrowers
        self.loan_penetration = loan_penetration
        self.on_time_rate = on_time_rate
        self.late_rate = late_rate
        self.default_rate = default_rate
        self.seed = seed
        self.as_of = as_of or date.today()
        self.config = config

        engine_config = engine_config or EngineConfig()
        self.currency = engine_config.currency
        self.ledger = LoanLedger(config=engine_config.ledger, penalty_defaults=engine_config.penalties)
        self.borrowers: dict[str, Borrower] = {}
        self.warnings: list[EarlyWarning] = []

        self.fake = Faker("en_US")
        self._rng = random.Random(seed)
        if seed is not None:
            self.fake.seed_instance(seed)

    def generate(self) -> LoanLedger:
        """Run the simulation.

        Returns
        -------
        LoanLedger
            Ledger holding every loan, payment, penalty and risk score.
        """
        logger.info(
            "Starting portfolio simulation: %d borrowers, %.0f%% with loans, as of %s",
            self.num_borrowers,
            self.loan_penetration * 100,
            self.as_of.isoformat(),
        )

        for _ in range(self.num_borrowers):
            borrower = self._generate_borrower()
            self.borrowers[borrower.borrower_id] = borrower

        candidates = sorted(self.borrowers.values(), key=lambda b: b.credit_score, reverse=True)
        num_loans = int(len(candidates) * self.loan_penetration)

        for borrower in candidates[:num_loans]:
            loan_number = self._originate(borrower)
            if loan_number is not None:
                self._simulate_repayments(loan_number)

        for loan_number in list(self.ledger.loans):
            self.ledger.assess_penalties(loan_number, as_of=self.as_of)
            self.ledger.refresh_status(loan_number, as_of=self.as_of)

        self.ledger.score_all_active_loans(as_of=self.as_of)
        self.warnings = generate_warnings(self.ledger, as_of=self.as_of)

        logger.info(
            "Simulation finished: %d loans, %d payments, %d penalties, %d warnings",
            len(self.ledger.loans),
            len(self.ledger.payments),
            len(self.ledger.penalties),
            len(self.warnings),
        )
        return self.ledger

    def _generate_borrower(self) -> Borrower:
        employment = self._rng.choices(EMPLOYMENT_STATUSES, weights=EMPLOYMENT_WEIGHTS, k=1)[0]
        if employment == "UNEMPLOYED":
            income = self._rng.randint(5, 15) * 1000
        else:
            income = self._rng.randint(15, 250) * 1000

        return Borrower(
            borrower_id=self.fake.uuid4(),
            name=self.fake.name(),
            phone=self.fake.msisdn(),
            monthly_income=Decimal(income),
            employment_status=employment,
            credit_score=min(850, max(300, int(self._rng.gauss(640, 80)))),
            customer_since=self.as_of - timedelta(days=self._rng.randint(60, 365 * 5)),
            kyc_verified=self._rng.random() < 0.7,
        )

    def _originate(self, borrower: Borrower) -> str | None:
        """Approve, register and disburse a loan; None when declined."""
        factors = derive_credit_factors(
            self.ledger.get_borrower_loans(borrower.borrower_id),
            borrower.monthly_income,
            borrower.customer_since,
            self.as_of,
            borrower.employment_status,
            borrower.kyc_verified,
        )
        report = calculate_credit_report(factors, borrower.monthly_income)
        if report.max_recommended_loan <= 0:
            return None

        low, high = RATE_BY_GRADE[report.grade]
        rate = Decimal(str(round(self._rng.uniform(low, high), 2)))
        term_months = self._rng.choice([3, 6, 9, 12, 18, 24])
        ceiling = min(report.max_recommended_loan, borrower.monthly_income * 6)
        # Round to the nearest thousand
        amount = ceiling * Decimal(str(self._rng.uniform(0.2, 1.0)))
        principal = max(Decimal("5000"), (amount / 1000).quantize(Decimal("1")) * 1000)

        start_date = add_months(self.as_of, -self._rng.randint(1, 18))
        loan = self.ledger.register_loan(
            borrower_id=borrower.borrower_id,
            principal=principal,
            annual_rate_percent=rate,
            term_months=term_months,
            start_date=start_date,
            credit_score=borrower.credit_score,
            monthly_income=borrower.monthly_income,
        )
        self.ledger.disburse(loan.loan_number, DISBURSEMENT_FEES, disbursement_date=start_date)
        return loan.loan_number

    def _simulate_repayments(self, loan_number: str) -> None:
        """Pay installments according to a randomly drawn behaviour profile."""
        behavior = self._rng.choices(
            ["good", "late", "defaulter"],
            weights=[self.on_time_rate, self.late_rate, self.default_rate],
            k=1,
        )[0]
        stop_after = self._rng.randint(1, 4)
        loan = self.ledger.get_loan(loan_number)
        method = self._rng.choice(list(PaymentMethod))

        for entry in loan.schedule:
            if behavior == "defaulter" and entry.sequence_number > stop_after:
                break
            if behavior == "late":
                paid_on = entry.due_date + timedelta(days=self._rng.randint(4, 40))
            else:
                paid_on = entry.due_date + timedelta(days=self._rng.randint(-3, 2))
            if paid_on > self.as_of:
                break

            self.ledger.assess_penalties(loan_number, as_of=paid_on)
            if entry.is_paid:
                continue
            self.ledger.record_payment(loan_number, entry.remaining_due, payment_date=paid_on, method=method)
            if loan.status != LoanStatus.ACTIVE:
                break

    def export(self, sinks: list[Any]) -> None:
        """Export simulation records to sinks.

        Parameters
        ----------
        sinks : list[Any]
            Sink instances (JsonFileSink, ConsoleSink).
        """
        loans = list(self.ledger.loans.values())
        installments = [
            {"loan_number": loan.loan_number, **to_dict(entry)} for loan in loans for entry in loan.schedule
        ]
        risk_scores = [
            {"loan_number": number, **to_dict(score)} for number, score in self.ledger.risk_scores.items()
        ]
        loan_rows = [
            {k: v for k, v in to_dict(loan).items() if k not in ("schedule", "superseded_schedules")}
            for loan in loans
        ]

        for sink in sinks:
            sink.write_batch("borrowers", list(self.borrowers.values()))
            sink.write_batch("loans", loan_rows)
            sink.write_batch("installments", installments)
            sink.write_batch("payments", list(self.ledger.payments.values()))
            sink.write_batch("fees", self.ledger.fees)
            sink.write_batch("penalties", self.ledger.penalties)
            sink.write_batch("risk_scores", risk_scores)
            sink.write_batch("warnings", self.warnings)

        logger.info("Exported portfolio to %d sinks", len(sinks))

    def get_portfolio_summary(self) -> dict[str, Any]:
        """Get summary statistics for the simulated portfolio.

        Returns
        -------
        dict[str, Any]
            Portfolio summary statistics.
        """
        loans = list(self.ledger.loans.values())
        if not loans:
            return {}

        status_counts: dict[str, int] = {}
        for loan in loans:
            status_counts[loan.status.value] = status_counts.get(loan.status.value, 0) + 1

        risk_levels: dict[str, int] = {}
        for score in self.ledger.risk_scores.values():
            risk_levels[score.level.value] = risk_levels.get(score.level.value, 0) + 1

        outstanding = sum((l.outstanding_balance for l in loans), Decimal("0"))
        return {
            "total_loans": len(loans),
            "currency": self.currency,
            "total_principal": str(sum((l.terms.principal for l in loans), Decimal("0"))),
            "outstanding_balance": str(outstanding),
            "outstanding_display": format_currency(outstanding, self.currency),
            "total_penalties": str(sum((p.amount for p in self.ledger.penalties), Decimal("0"))),
            "loan_status_distribution": status_counts,
            "risk_level_distribution": risk_levels,
            "predicted_defaults": sum(1 for s in self.ledger.risk_scores.values() if s.predicted_default),
            "warnings": len(self.warnings),
        }
