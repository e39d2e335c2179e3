"""Markdown links to the chain explorer."""

from __future__ import annotations

SCAN_URL = "https://suiscan.xyz/mainnet"


def tx(digest: object, tag: str | None = None) -> str:
    label = tag if tag is not None else str(digest)
    return f"[{label}]({SCAN_URL}/tx/{digest})"


def object(object_id: object, tag: str | None = None) -> str:
    label = tag if tag is not None else str(object_id)
    return f"[{label}]({SCAN_URL}/object/{object_id})"


def account(address: object, tag: str | None = None) -> str:
    label = tag if tag is not None else str(address)
    return f"[{label}]({SCAN_URL}/account/{address}/portfolio)"


def coin(coin_type: str, tag: str | None = None) -> str:
    label = tag if tag is not None else coin_type
    return f"[{label}]({SCAN_URL}/coin/{coin_type}/txs)"


def checkpoint(digest: object, number: int) -> str:
    return f"[{number}]({SCAN_URL}/checkpoint/{digest})"