"""Tests for coupon code generation and uniqueness."""

import itertools
import re

import pytest

from services.coupon.app.core.CouponCodeGenerator import (
    CouponCodeGenerator,
    format_code,
    normalize_code,
)
from services.coupon.app.core.errors import GenerationExhaustedError
from tests.conftest import run

CODE_PATTERN = re.compile(r"^[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{2}$")


async def _never_exists(code):
    return False


async def _always_exists(code):
    return True


class TestCodeFormat:
    def test_generated_code_matches_format(self):
        generator = CouponCodeGenerator(_never_exists)
        for _ in range(50):
            assert CODE_PATTERN.match(generator.generate_code())

    def test_format_code_groups_ten_characters(self):
        assert format_code("ABCD1234XY") == "ABCD-1234-XY"

    def test_format_code_leaves_other_lengths(self):
        assert format_code("ABC123") == "ABC123"

    def test_normalize_code(self):
        assert normalize_code("  abcd-1234-xy ") == "ABCD-1234-XY"


class TestUniqueCode:
    def test_returns_first_free_code(self):
        generator = CouponCodeGenerator(_never_exists)
        assert CODE_PATTERN.match(run(generator.generate_unique_code()))

    def test_exhaustion_after_max_retries(self):
        """Every candidate collides, so generation gives up after five draws."""
        attempts = []

        async def exists(code):
            attempts.append(code)
            return True

        generator = CouponCodeGenerator(exists)
        with pytest.raises(GenerationExhaustedError) as exc_info:
            run(generator.generate_unique_code(max_retries=5))

        assert len(attempts) == 5
        assert exc_info.value.code == "ERR-CODE-EXHAUSTED"
        assert "5 attempts" in exc_info.value.message

    def test_finds_the_single_free_code(self):
        """Two-letter alphabet: every code but the last drawn one is taken."""
        draws = itertools.chain(["A"] * 10, ["A"] * 10, ["B"] * 10)
        taken = {"AAAA-AAAA-AA"}

        async def exists(code):
            return code in taken

        generator = CouponCodeGenerator(exists, alphabet="AB", choice=lambda _: next(draws))

        assert run(generator.generate_unique_code(max_retries=3)) == "BBBB-BBBB-BB"

    def test_single_retry_exhausts(self):
        generator = CouponCodeGenerator(_always_exists)
        with pytest.raises(GenerationExhaustedError):
            run(generator.generate_unique_code(max_retries=1))
