"""Tests for paging parameter resolution and session tokens."""

import pytest

from mindtest.core.pagination import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_NUMBER,
    MAX_PAGE_SIZE,
    Page,
)
from mindtest.core.security import (
    generate_record_id,
    generate_session_token,
    is_valid_session_token,
)


class TestPage:
    """Tests for Page.from_params."""

    @pytest.mark.parametrize(
        ("requested", "served"),
        [(1, 1), (10, 10), (500, 500), (501, 500), (10_000, 500)],
    )
    def test_size_is_min_of_requested_and_max(self, requested, served):
        assert Page.from_params(1, requested).limit == served

    def test_offset(self):
        page = Page.from_params(3, 25)
        assert page.offset == 50

    def test_defaults(self):
        page = Page.from_params(None, None)
        assert page.number == 1
        assert page.limit == DEFAULT_PAGE_SIZE
        assert page.offset == 0

    def test_strings_are_parsed(self):
        page = Page.from_params("2", "50")
        assert (page.number, page.limit) == (2, 50)

    @pytest.mark.parametrize("bad", ["abc", "0", "-5", "1.5"])
    def test_invalid_values_fall_back(self, bad):
        page = Page.from_params(bad, bad)
        assert page.number == 1
        assert page.limit == DEFAULT_PAGE_SIZE

    def test_custom_bounds(self):
        assert Page.from_params(1, None, default_size=20, max_size=50).limit == 20
        assert Page.from_params(1, 80, default_size=20, max_size=50).limit == 50
        assert MAX_PAGE_SIZE == 500

    @pytest.mark.parametrize("huge", [10**20, str(10**20)])
    def test_page_number_clamped(self, huge):
        """Oversized page numbers stay representable as a SQL offset."""
        page = Page.from_params(huge, MAX_PAGE_SIZE)
        assert page.number == MAX_PAGE_NUMBER
        assert page.offset == (MAX_PAGE_NUMBER - 1) * MAX_PAGE_SIZE
        assert page.offset < 2**63


class TestSessionTokens:
    def test_generated_tokens_are_valid_and_unique(self):
        tokens = {generate_session_token() for _ in range(100)}
        assert len(tokens) == 100
        assert all(is_valid_session_token(token) for token in tokens)

    @pytest.mark.parametrize(
        "token",
        ["V1StGXR8_Z5jdHi6B-myT", "3f8e2a0c-6b1d-4c7e-9a55-2d0f1e7b8c90"],
    )
    def test_legacy_tokens_accepted(self, token):
        assert is_valid_session_token(token)

    @pytest.mark.parametrize("token", [None, "", "short", "has space in it", "a" * 129])
    def test_malformed_tokens_rejected(self, token):
        assert not is_valid_session_token(token)

    def test_record_ids(self):
        assert generate_record_id() != generate_record_id()
        assert len(generate_record_id()) == 36
