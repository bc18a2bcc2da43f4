import math

import pytest

from stockgrabber.parsing import (
    format_cell_value,
    format_compact_date,
    format_locale_number,
    format_magnitude,
    format_percent,
    format_price,
    format_ratio,
    format_table_row,
    parse_locale_number,
    parse_optional_number,
    parse_scientific,
)


# Tests for parse_scientific
@pytest.mark.parametrize("value", [None, "", "abc", "1.2.3", "E+09", "nan", "inf"])
def test_parse_scientific_malformed_returns_zero(value):
    """Test malformed or absent tokens degrade to zero."""
    assert parse_scientific(value) == 0


def test_parse_scientific_exponent():
    """Test scientific notation strings."""
    assert parse_scientific("1.5E+09") == 1500000000
    assert parse_scientific("-1.5E+03") == -1500
    assert parse_scientific("2.5e-1") == 0.25


def test_parse_scientific_plain_decimal():
    """Test plain decimal strings."""
    assert parse_scientific("1234.5") == 1234.5
    assert parse_scientific(" 42 ") == 42


def test_parse_scientific_number_identity():
    """Test numbers are returned unchanged."""
    assert parse_scientific(7) == 7
    assert parse_scientific(-3.25) == -3.25


# Tests for parse_locale_number
def test_parse_locale_number_strips_commas_and_plus():
    """Test display-formatted numbers."""
    assert parse_locale_number("+1,234.56") == 1234.56
    assert parse_locale_number("-2,500") == -2500
    assert parse_locale_number("9,800") == 9800


@pytest.mark.parametrize("value", [None, "", "-", "N/A"])
def test_parse_locale_number_malformed_returns_zero(value):
    """Test unparseable values degrade to zero."""
    assert parse_locale_number(value) == 0


# Tests for format_magnitude
def test_format_magnitude_suffixes():
    """Test K/M/B/T scaling."""
    assert format_magnitude(1_000_000) == "1.00M"
    assert format_magnitude(1_234_000_000_000) == "1.23T"
    assert format_magnitude(4_560_000_000) == "4.56B"
    assert format_magnitude(2500) == "2.50K"


def test_format_magnitude_preserves_sign():
    """Test negative values keep a leading minus."""
    assert format_magnitude(-2500) == "-2.50K"
    assert format_magnitude(-3_000_000) == "-3.00M"


def test_format_magnitude_small_values():
    """Test values below one thousand are not scaled."""
    assert format_magnitude(950) == "950"
    assert format_magnitude(-12) == "-12"


def test_format_magnitude_zero_conventions():
    """Test both zero/absent conventions."""
    assert format_magnitude(0) == "0"
    assert format_magnitude(None) == "0"
    assert format_magnitude(0, empty="-") == "-"
    assert format_magnitude(None, empty="-") == "-"


def test_format_magnitude_without_thousands_scaling():
    """Test financial-style formatting keeps thousands grouped."""
    assert format_magnitude(123456, scale_thousands=False) == "123.456"
    assert format_magnitude(2_000_000, scale_thousands=False) == "2.00M"


def test_format_magnitude_is_total():
    """Test no input raises."""
    assert format_magnitude("garbage") == "0"
    assert format_magnitude(math.inf) == "0"
    assert format_magnitude(math.nan, empty="-") == "-"
    assert format_magnitude("1.5E+09") == "1.50B"


# Tests for locale formatting
def test_format_locale_number_grouping():
    """Test id-ID style grouping."""
    assert format_locale_number(1234567) == "1.234.567"
    assert format_locale_number(1234.5) == "1.234,5"
    assert format_locale_number(-9876.125) == "-9.876,125"
    assert format_locale_number(0) == "0"


def test_format_price_two_decimals():
    """Test prices keep at most two decimals."""
    assert format_price(9875.4567) == "9.875,46"
    assert format_price(9800) == "9.800"


# Tests for format_compact_date
def test_format_compact_date_valid():
    """Test YYYYMMDD conversion."""
    assert format_compact_date("20240315") == "2024-03-15"


@pytest.mark.parametrize(
    "value", ["bad", "2024-03-15", "", None, "202403", 20240315, 2024.0315]
)
def test_format_compact_date_passthrough(value):
    """Test non-conforming values are returned unchanged."""
    assert format_compact_date(value) == value


# Tests for financial cell formatting
def test_format_cell_value_numeric():
    """Test numeric cells are scaled."""
    assert format_cell_value("1,234,567,890") == "1.23B"
    assert format_cell_value("-5000000") == "-5.00M"
    assert format_cell_value("12345") == "12.345"


def test_format_cell_value_passthrough():
    """Test text cells are unchanged and blanks become a dash."""
    assert format_cell_value("Total Assets") == "Total Assets"
    assert format_cell_value("(1,234)") == "(1,234)"
    assert format_cell_value("12%") == "12%"
    assert format_cell_value("") == "-"
    assert format_cell_value("-") == "-"


def test_format_table_row_keeps_label():
    """Test the first column is never formatted."""
    assert format_table_row(["2023", "1000000", "abc"]) == ["2023", "1.00M", "abc"]
    assert format_table_row([]) == []


# Tests for booleans and optional numbers
@pytest.mark.parametrize("value", [True, False])
def test_parsers_reject_booleans(value):
    """Test booleans are not treated as numbers."""
    assert parse_scientific(value) == 0
    assert parse_scientific(value) is not value
    assert parse_locale_number(value) == 0
    assert parse_optional_number(value) is None


@pytest.mark.parametrize(
    "value, expected",
    [("12.5", 12.5), ("+1,234.5", 1234.5), (0, 0.0), (7, 7.0), ("-0.25", -0.25)],
)
def test_parse_optional_number(value, expected):
    """Test parseable values, including a real zero."""
    assert parse_optional_number(value) == expected


@pytest.mark.parametrize("value", [None, "", "N/A", "-", math.nan, math.inf])
def test_parse_optional_number_absent(value):
    """Test absent or unparseable values are None, not zero."""
    assert parse_optional_number(value) is None


# Tests for small-value rounding
def test_format_magnitude_small_values_round_to_whole():
    """Test unscaled values round half up to whole numbers by default."""
    assert format_magnitude(12.5) == "13"
    assert format_magnitude(-12.5) == "-13"
    assert format_magnitude(999.4) == "999"
    assert format_magnitude(0.4) == "0"


def test_format_magnitude_small_values_with_decimals():
    """Test statement-style formatting keeps up to three decimals."""
    assert format_magnitude(12.5, max_decimals=3) == "12,5"
    assert format_magnitude(1234.5678, scale_thousands=False, max_decimals=3) == "1.234,568"
    assert format_cell_value("12.5") == "12,5"


def test_format_locale_number_half_up_and_large_values():
    """Test half-up rounding and values beyond default decimal precision."""
    assert format_locale_number(2.5, max_decimals=0) == "3"
    assert format_price(0.125) == "0,13"
    assert format_locale_number(1e30, max_decimals=3).startswith("1.000.000")
    assert format_locale_number(math.nan) == "0"


# Tests for ratio and percent display
def test_format_ratio_and_percent():
    """Test fixed-decimal ratios and fraction percentages."""
    assert format_ratio(15.234) == "15.23"
    assert format_ratio(0.0) == "0.00"
    assert format_ratio(None) == "-"
    assert format_percent(0.1825) == "18.25%"
    assert format_percent(-0.05) == "-5.00%"
    assert format_percent(None) == "-"
