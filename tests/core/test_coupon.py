"""Tests for coupon code generation."""

import re

from airwalk.prizes.service import generate_coupon_code

COUPON_PATTERN = re.compile(r"^[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}$")


def test_coupon_format():
    for _ in range(200):
        assert COUPON_PATTERN.match(generate_coupon_code())


def test_coupons_vary():
    codes = {generate_coupon_code() for _ in range(100)}
    assert len(codes) > 95
