"""Tests for price-range parsing and property filter building."""

import pytest

from app.core.errors import ValidationError
from app.schemas.property import PropertyFilterParams
from app.services.property_filters import build_property_filters, parse_price_range, split_csv


@pytest.mark.unit
@pytest.mark.parametrize("raw, expected", [
    ("100k-500k", (100_000, 500_000)),
    ("1M-2M", (1_000_000, 2_000_000)),
    ("1M-2.5M", (1_000_000, 2_500_000)),
    ("₦50k-200k", (50_000, 200_000)),
    ("100-500k", (100_000, 500_000)),
    ("1,000,000 - 2,000,000", (1_000_000, 2_000_000)),
    ("5M+", (5_000_000, None)),
    ("250K+", (250_000, None)),
])
def test_parse_price_range(raw, expected):
    """Test k/M suffixes, currency symbol, separators and open ranges."""
    assert parse_price_range(raw) == expected


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["", "cheap", "100k-", "1-2-3", "500k-100k", "10x-20x"])
def test_parse_price_range_rejects_garbage(raw):
    """Test that unparseable ranges are a validation error, not a silent no-op."""
    with pytest.raises(ValidationError):
        parse_price_range(raw)


@pytest.mark.unit
def test_split_csv_drops_blanks():
    """Test CSV splitting trims values and ignores empty items."""
    assert split_csv(" Lagos, ,Abuja ,") == ["Lagos", "Abuja"]
    assert split_csv(None) == []


@pytest.mark.unit
def test_build_property_filters_empty():
    """Test that no query params means no filters."""
    assert build_property_filters(PropertyFilterParams()) == []


@pytest.mark.unit
def test_build_property_filters_all_params():
    """Test one expression per criterion, two for a closed price range."""
    params = PropertyFilterParams(
        transaction_type="Rent",
        states="Lagos,Abuja",
        types="house,apartment",
        price_range="100k-500k",
        search="duplex",
    )
    assert len(build_property_filters(params)) == 6


@pytest.mark.unit
def test_build_property_filters_open_price_range():
    """Test that '5M+' only adds a lower bound."""
    params = PropertyFilterParams(price_range="5M+")
    assert len(build_property_filters(params)) == 1
