import pytest

from suimev.coin import format_sui_with_symbol, is_native_coin


def test_native_coin():
    assert is_native_coin("0x2::sui::SUI")
    assert not is_native_coin("0x2::coin::Coin")
    assert not is_native_coin("0x2::sui::sui")


def test_whole_sui():
    assert format_sui_with_symbol(1_000_000_000) == "1 SUI"


def test_fractional_sui():
    assert format_sui_with_symbol(1_500_000_000) == "1.5 SUI"


def test_one_mist_has_no_exponent():
    assert format_sui_with_symbol(1) == "0.000000001 SUI"


@pytest.mark.parametrize("value", [0, 7, 123_456_789, 10**18, 42_000_000_001])
def test_round_trip(value):
    text = format_sui_with_symbol(value)
    assert text.endswith(" SUI")
    number = text[: -len(" SUI")]
    assert "e" not in number.lower()
    assert float(number) == value / 1_000_000_000