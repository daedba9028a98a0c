"""Human-readable loan and receipt numbers.

Format: ``<PREFIX>-<base36 millisecond timestamp>-<5 random base36 chars>``,
all uppercase, e.g. ``LN-M1Z2K3P4-7QX0B``. Numbers are not coordinated
across processes; the random suffix makes collisions astronomically unlikely
but the store should still treat a duplicate as a retry.
"""

import random
import string
import time

LOAN_PREFIX = "LN"
RECEIPT_PREFIX = "RCP"
SUFFIX_LENGTH = 5

_ALPHABET = string.digits + string.ascii_uppercase
# OS entropy, no shared seed state between callers
_rng = random.SystemRandom()


def to_base36(value: int) -> str:
    """Encode a non-negative integer in uppercase base 36."""
    if value < 0:
        raise ValueError("base36 encoding needs a non-negative integer")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_reference(prefix: str, timestamp_ms: int | None = None) -> str:
    """Generate a ``PREFIX-TIMESTAMP-RANDOM`` reference."""
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    suffix = "".join(_rng.choice(_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{prefix}-{to_base36(timestamp_ms)}-{suffix}".upper()


def generate_loan_number() -> str:
    """Generate a loan number such as ``LN-M1Z2K3P4-7QX0B``."""
    return generate_reference(LOAN_PREFIX)


def generate_receipt_number() -> str:
    """Generate a payment receipt number such as ``RCP-M1Z2K3P4-7QX0B``."""
    return generate_reference(RECEIPT_PREFIX)
