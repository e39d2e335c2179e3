"""Signing and submitting bids to Shio auctions."""

from __future__ import annotations

import asyncio
import base64
import hashlib
import json
import logging
from typing import Any

import httpx
from nacl.signing import SigningKey

from suimev.shio.conn import DEFAULT_RETRIES, ShioCollector, new_shio_conn
from suimev.shio.types import SHIO_FEED_URL, SHIO_JSON_RPC_URL

log = logging.getLogger(__name__)

_BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
# scope TransactionData, version V0, app id Sui
_TRANSACTION_INTENT = bytes([0, 0, 0])
_ED25519_FLAG = 0x00
_U64_MAX = (1 << 64) - 1


def base58_encode(data: bytes) -> str:
    """Base58 with the Bitcoin alphabet, as used for transaction digests."""
    data = bytes(data)
    zeros = len(data) - len(data.lstrip(b"\0"))
    number = int.from_bytes(data, "big")
    digits = []
    while number:
        number, remainder = divmod(number, 58)
        digits.append(_BASE58_ALPHABET[remainder])
    return "1" * zeros + "".join(reversed(digits))


def transaction_intent_digest(tx_bytes: bytes) -> bytes:
    """Blake2b-256 of the transaction intent followed by the BCS transaction bytes."""
    return hashlib.blake2b(_TRANSACTION_INTENT + bytes(tx_bytes), digest_size=32).digest()


class Ed25519KeyPair:
    """An Ed25519 key producing flag-signature-public-key signatures."""

    def __init__(self, signing_key: SigningKey) -> None:
        self._signing_key = signing_key

    @classmethod
    def from_seed(cls, seed: bytes) -> "Ed25519KeyPair":
        seed = bytes(seed)
        if len(seed) != 32:
            raise ValueError("an Ed25519 seed is 32 bytes")
        return cls(SigningKey(seed))

    @property
    def public_key(self) -> bytes:
        return self._signing_key.verify_key.encode()

    def sign(self, message: bytes) -> bytes:
        signature = self._signing_key.sign(bytes(message)).signature
        return bytes([_ED25519_FLAG]) + signature + self.public_key

    def __repr__(self) -> str:
        return f"Ed25519KeyPair(public_key={self.public_key.hex()})"


def _digest_text(opp_tx_digest: bytes | str) -> str:
    if isinstance(opp_tx_digest, str):
        return opp_tx_digest
    return base58_encode(opp_tx_digest)


def _check_amount(bid_amount: int) -> int:
    if isinstance(bid_amount, bool) or not isinstance(bid_amount, int) or not 0 <= bid_amount <= _U64_MAX:
        raise ValueError(f"bid amount must be a u64: {bid_amount!r}")
    return bid_amount


def _signed_transaction(keypair: Ed25519KeyPair, tx_bytes: bytes) -> tuple[str, str]:
    tx_b64 = base64.b64encode(bytes(tx_bytes)).decode("ascii")
    signature = keypair.sign(transaction_intent_digest(tx_bytes))
    return tx_b64, base64.b64encode(signature).decode("ascii")


class ShioExecutor:
    """Sends signed bids over the feed connection."""

    def __init__(self, keypair: Ed25519KeyPair, bid_sender: asyncio.Queue[Any]) -> None:
        self.keypair = keypair
        self.bid_sender = bid_sender

    def name(self) -> str:
        return "ShioExecutor"

    def encode_bid(self, tx_bytes: bytes, bid_amount: int, opp_tx_digest: bytes | str) -> dict[str, Any]:
        tx_b64, sig = _signed_transaction(self.keypair, tx_bytes)
        return {
            "oppTxDigest": _digest_text(opp_tx_digest),
            "bidAmount": _check_amount(bid_amount),
            "txData": tx_b64,
            "sig": sig,
        }

    async def execute(self, tx_bytes: bytes, bid_amount: int, opp_tx_digest: bytes | str) -> None:
        await self.bid_sender.put(self.encode_bid(tx_bytes, bid_amount, opp_tx_digest))


class ShioRPCExecutor:
    """Submits signed bids through the JSON-RPC endpoint."""

    def __init__(self, keypair: Ed25519KeyPair, url: str = SHIO_JSON_RPC_URL) -> None:
        self.keypair = keypair
        self.url = url
        self.rpc_client = httpx.AsyncClient()

    def name(self) -> str:
        return "ShioRPCExecutor"

    def encode_bid(self, tx_bytes: bytes, bid_amount: int, opp_tx_digest: bytes | str) -> dict[str, Any]:
        tx_b64, sig = _signed_transaction(self.keypair, tx_bytes)
        return {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "shio_submitBid",
            "params": [_digest_text(opp_tx_digest), _check_amount(bid_amount), tx_b64, sig],
        }

    async def execute(self, tx_bytes: bytes, bid_amount: int, opp_tx_digest: bytes | str) -> tuple[int, str]:
        """Post the bid; returns the response status and body."""
        bid = self.encode_bid(tx_bytes, bid_amount, opp_tx_digest)
        log.warning("shio >> %s", json.dumps(bid))
        response = await self.rpc_client.post(self.url, json=bid)
        log.warning("shio << %s %r", response.status_code, response.text)
        return response.status_code, response.text


async def new_shio_collector_and_executor(
    keypair: Ed25519KeyPair, shio_feed_url: str | None = None, num_retries: int | None = None
) -> tuple[ShioCollector, ShioExecutor]:
    """Open one feed connection shared by a collector and a bidding executor."""
    bids, items = await new_shio_conn(
        shio_feed_url if shio_feed_url is not None else SHIO_FEED_URL,
        DEFAULT_RETRIES if num_retries is None else num_retries,
    )
    return ShioCollector(items), ShioExecutor(keypair, bids)