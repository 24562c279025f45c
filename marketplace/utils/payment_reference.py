# marketplace/utils/payment_reference.py
"""Human-typeable references for manual (Multicaixa Express) payments."""
import random
import re
import time
from typing import Optional

from ..core.config import settings

BASE36_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
RANDOM_SUFFIX_LENGTH = 6

_system_random = random.SystemRandom()


def to_base36(value: int) -> str:
    """Encode a non-negative integer in upper-case base36."""
    if value < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def random_base36(length: int, rng: Optional[random.Random] = None) -> str:
    rng = rng or _system_random
    return "".join(rng.choice(BASE36_ALPHABET) for _ in range(length))


def generate_payment_reference(
    now_ms: Optional[int] = None,
    rng: Optional[random.Random] = None,
    prefix: Optional[str] = None,
) -> str:
    """Build ``PREFIX-<base36 millis>-<6 random base36>``, upper-cased.

    Uniqueness is practical, not cryptographic: the timestamp orders
    references and the suffix separates ones created in the same millisecond.
    The store enforces one enrollment per (user, subject), not per reference.
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    prefix = prefix or settings.payment_reference_prefix
    return f"{prefix}-{to_base36(now_ms)}-{random_base36(RANDOM_SUFFIX_LENGTH, rng)}".upper()


def reference_pattern(prefix: Optional[str] = None) -> re.Pattern:
    prefix = prefix or settings.payment_reference_prefix
    return re.compile(rf"^{re.escape(prefix.upper())}-[0-9A-Z]+-[0-9A-Z]{{{RANDOM_SUFFIX_LENGTH}}}$")


def generate_certificate_code(rng: Optional[random.Random] = None) -> str:
    return f"CERT-{random_base36(8, rng)}"
