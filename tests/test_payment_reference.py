import random

import pytest

from marketplace.utils.payment_reference import (
    generate_payment_reference, generate_certificate_code, reference_pattern, to_base36
)


def test_reference_matches_format():
    reference = generate_payment_reference()
    assert reference_pattern().match(reference)
    assert reference.startswith("JU10-")
    assert reference == reference.upper()


def test_reference_encodes_timestamp_in_base36():
    reference = generate_payment_reference(now_ms=1_700_000_000_000, rng=random.Random(7))
    prefix, stamp, suffix = reference.split("-")
    assert prefix == "JU10"
    assert int(stamp, 36) == 1_700_000_000_000
    assert len(suffix) == 6


def test_reference_is_deterministic_with_injected_clock_and_rng():
    first = generate_payment_reference(now_ms=42, rng=random.Random(1))
    second = generate_payment_reference(now_ms=42, rng=random.Random(1))
    assert first == second


def test_ten_thousand_references_are_distinct():
    references = {generate_payment_reference() for _ in range(10_000)}
    assert len(references) == 10_000


def test_same_millisecond_references_differ_by_suffix():
    rng = random.Random(2024)
    references = {generate_payment_reference(now_ms=1_000, rng=rng) for _ in range(1_000)}
    assert len(references) == 1_000


@pytest.mark.parametrize("value,expected", [(0, "0"), (35, "Z"), (36, "10"), (1295, "ZZ")])
def test_to_base36(value, expected):
    assert to_base36(value) == expected


def test_to_base36_rejects_negative():
    with pytest.raises(ValueError):
        to_base36(-1)


def test_certificate_code_format():
    code = generate_certificate_code(rng=random.Random(3))
    assert code.startswith("CERT-")
    assert len(code) == len("CERT-") + 8
    assert code == code.upper()
