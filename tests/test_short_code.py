"""
Tests for bin short-code generation.
"""

from unittest.mock import patch

import pytest

from app.services import short_code
from app.services.short_code import (
    CODE_CHARS,
    CODE_LENGTH,
    ShortCodeExhaustedError,
    generate_short_code,
    generate_unique_bin_id,
)


class TestGenerateShortCode:
    """Tests for generate_short_code()."""

    def test_length_and_alphabet(self):
        for _ in range(50):
            code = generate_short_code()
            assert len(code) == CODE_LENGTH
            assert set(code) <= set(CODE_CHARS)

    def test_alphabet_has_no_ambiguous_characters(self):
        assert not set("01ILO") & set(CODE_CHARS)


class TestGenerateUniqueBinId:
    """Tests for generate_unique_bin_id()."""

    def test_skips_existing_codes(self, db, tools_bin):
        codes = iter(["T1", "T1", "NEW234"])

        with patch.object(short_code, "generate_short_code", lambda: next(codes)):
            assert generate_unique_bin_id(db) == "NEW234"

    def test_trashed_bins_count_as_taken(self, db, trashed_bin):
        codes = iter(["X1", "FRESH2"])

        with patch.object(short_code, "generate_short_code", lambda: next(codes)):
            assert generate_unique_bin_id(db) == "FRESH2"

    def test_gives_up_after_max_attempts(self, db, tools_bin):
        with patch.object(short_code, "generate_short_code", lambda: "T1"):
            with pytest.raises(ShortCodeExhaustedError):
                generate_unique_bin_id(db)
