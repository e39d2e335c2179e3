"""Coin type helpers."""

from __future__ import annotations

from decimal import Decimal

SUI_COIN_TYPE = "0x2::sui::SUI"
MIST_PER_SUI = 1_000_000_000


def is_native_coin(coin_type: str) -> bool:
    return coin_type == SUI_COIN_TYPE


def _format_float(value: float) -> str:
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_sui_with_symbol(value: int) -> str:
    """Format an amount in MIST as SUI, e.g. `1.5 SUI`."""
    return f"{_format_float(value / MIST_PER_SUI)} SUI"