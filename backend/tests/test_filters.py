from datetime import date

import pytest

from transactions.filters import (
    DEFAULT_LIMIT,
    FilterDescriptor,
    normalize_filters,
    parse_category_ids,
    parse_date,
    parse_kind,
)
from transactions.records import TransactionKind


class TestTypeNormalization:

    @pytest.mark.parametrize("raw,expected", [
        ("expense", TransactionKind.EXPENSE),
        ("income", TransactionKind.INCOME),
        (" Income ", TransactionKind.INCOME),
        ("EXPENSE", TransactionKind.EXPENSE),
    ])
    def test_known_types(self, raw, expected):
        assert parse_kind(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "transfer", "expenses", "1"])
    def test_unknown_types_mean_both(self, raw):
        filters = normalize_filters(type=raw)

        assert filters.kind is None
        assert filters.includes(TransactionKind.EXPENSE)
        assert filters.includes(TransactionKind.INCOME)
        assert filters.is_single_partition is False

    def test_single_kind_excludes_other_partition(self):
        filters = normalize_filters(type="income")

        assert filters.is_single_partition is True
        assert filters.includes(TransactionKind.INCOME)
        assert not filters.includes(TransactionKind.EXPENSE)


class TestCategoryNormalization:

    def test_comma_separated(self):
        assert parse_category_ids("1,2, 3") == frozenset({1, 2, 3})

    def test_invalid_pieces_are_dropped(self):
        assert parse_category_ids("4,abc,,5x, 6") == frozenset({4, 6})

    def test_repeated_values(self):
        assert parse_category_ids(["1,2", "3", "nope"]) == frozenset({1, 2, 3})

    def test_underscored_and_non_ascii_digits_are_dropped(self):
        assert parse_category_ids("1_0,\u0663,7") == frozenset({7})

    @pytest.mark.parametrize("raw", [None, "", "abc", ",,", []])
    def test_nothing_parseable_means_no_filter(self, raw):
        assert normalize_filters(category_ids=raw).category_ids == frozenset()


class TestDateNormalization:

    def test_valid_dates(self):
        filters = normalize_filters(start_date="2024-01-13", end_date="2024-01-16")

        assert filters.date_from == date(2024, 1, 13)
        assert filters.date_to == date(2024, 1, 16)

    @pytest.mark.parametrize("raw", [
        "2024-13-01",
        "2024-02-30",
        "13/01/2024",
        "2024-1-5",
        "20240105",
        "yesterday",
        "",
    ])
    def test_malformed_dates_are_open_bounds(self, raw):
        assert parse_date(raw) is None

    def test_inverted_range_is_kept(self):
        filters = normalize_filters(start_date="2024-02-01", end_date="2024-01-01")

        assert filters.date_from > filters.date_to


class TestPagination:

    @pytest.mark.parametrize("raw,expected", [
        (0, 20),
        (-5, 20),
        ("abc", 20),
        (500, 100),
        ("0", 20),
        ("500", 100),
        (None, 20),
        ("", 20),
        ("1", 1),
        ("100", 100),
        (" 35 ", 35),
        ("1_0", 20),
        ("\u0661\u0662", 20),
        ("+5", 5),
        ("5.0", 20),
    ])
    def test_limit_clamping(self, raw, expected):
        assert normalize_filters(limit=raw).limit == expected

    @pytest.mark.parametrize("raw,expected", [
        (None, 1),
        ("", 1),
        ("abc", 1),
        ("0", 1),
        (-3, 1),
        ("2", 2),
        (7, 7),
        ("2_0", 1),
    ])
    def test_page_defaults(self, raw, expected):
        assert normalize_filters(page=raw).page == expected

    def test_huge_page_is_kept(self):
        page = "99999999999999999999"

        assert normalize_filters(page=page).page == int(page)

    def test_offset(self):
        assert normalize_filters(page="3", limit="10").offset == 20


class TestDescriptor:

    def test_defaults(self):
        filters = normalize_filters()

        assert filters == FilterDescriptor()
        assert filters.limit == DEFAULT_LIMIT
        assert filters.page == 1
        assert filters.offset == 0

    def test_as_dict_echoes_normalized_values(self):
        filters = normalize_filters(
            type="expense",
            category_ids="5,x,2",
            start_date="2024-01-01",
            end_date="bad",
            page="2",
            limit="500",
        )

        assert filters.as_dict() == {
            "type": "expense",
            "category_ids": [2, 5],
            "start_date": "2024-01-01",
            "end_date": None,
            "page": 2,
            "limit": 100,
        }
