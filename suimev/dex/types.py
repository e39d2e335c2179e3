"""Pools, tokens and swap events of the indexed DEX protocols."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from itertools import combinations
from typing import Any

from suimev.coin import SUI_COIN_TYPE

_U64_MAX = (1 << 64) - 1
_U32_MAX = (1 << 32) - 1
_U8_MAX = (1 << 8) - 1


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _normalize_object_id(value: str) -> str:
    """Full-width lower-case hex form of an object id, with or without a 0x prefix."""
    if not isinstance(value, str):
        raise ValueError(f"invalid object id: {value!r}")
    digits = value[2:] if value[:2].lower() == "0x" else value
    digits = digits.lower()
    if not digits or len(digits) > 64 or any(c not in "0123456789abcdef" for c in digits):
        raise ValueError(f"invalid object id: {value!r}")
    return "0x" + digits.rjust(64, "0")


class Protocol(enum.Enum):
    CETUS = "cetus"
    TURBOS = "turbos"
    AFTERMATH = "aftermath"
    KRIYA_AMM = "kriya_amm"
    KRIYA_CLMM = "kriya_clmm"
    FLOWX_AMM = "flowx_amm"
    FLOWX_CLMM = "flowx_clmm"
    DEEPBOOK_V2 = "deepbook_v2"
    DEEPBOOK_V3 = "deepbook_v3"
    VOLO = "volo"
    BLUE_MOVE = "blue_move"
    SUISWAP = "suiswap"
    INTEREST = "interest"
    ABEX = "abex"
    BABYSWAP = "babyswap"
    NAVI = "navi"

    @classmethod
    def parse(cls, value: str) -> "Protocol":
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unsupported protocol: {value}") from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Token:
    token_type: str
    decimals: int

    def __post_init__(self) -> None:
        if not isinstance(self.token_type, str):
            raise ValueError("token_type must be a string")
        if isinstance(self.decimals, bool) or not isinstance(self.decimals, int) or not 0 <= self.decimals <= _U8_MAX:
            raise ValueError(f"decimals must be a u8: {self.decimals!r}")

    def to_dict(self) -> dict[str, Any]:
        return {"token_type": self.token_type, "decimals": self.decimals}

    @classmethod
    def from_dict(cls, data: Any) -> "Token":
        if not isinstance(data, dict):
            raise ValueError("a token must be an object")
        try:
            return cls(data["token_type"], data["decimals"])
        except KeyError as exc:
            raise ValueError(f"missing token field {exc.args[0]}") from None


# variant -> ordered (field, kind)
_EXTRA_SCHEMA: dict[str, tuple[tuple[str, str], ...]] = {
    "None": (),
    "Cetus": (("fee_rate", "u64"),),
    "Turbos": (("fee", "u32"),),
    "Aftermath": (
        ("lp_type", "str"),
        ("fees_swap_in", "u64s"),
        ("fees_swap_out", "u64s"),
        ("fees_deposit", "u64s"),
        ("fees_withdraw", "u64s"),
    ),
    "KriyaAmm": (("lp_fee_percent", "u64"), ("protocol_fee_percent", "u64")),
    "KriyaClmm": (("fee_rate", "u64"),),
    "FlowxAmm": (("fee_rate", "u64"),),
    "FlowxClmm": (("fee_rate", "u64"),),
    "DeepbookV2": (
        ("taker_fee_rate", "u64"),
        ("maker_rebate_rate", "u64"),
        ("tick_size", "u64"),
        ("lot_size", "u64"),
    ),
}


def _is_uint(value: Any, limit: int) -> bool:
    return not isinstance(value, bool) and isinstance(value, int) and 0 <= value <= limit


def _check_param(name: str, kind: str, value: Any) -> None:
    ok = {
        "u64": lambda v: _is_uint(v, _U64_MAX),
        "u32": lambda v: _is_uint(v, _U32_MAX),
        "str": lambda v: isinstance(v, str),
        "u64s": lambda v: isinstance(v, list) and all(_is_uint(x, _U64_MAX) for x in v),
    }[kind](value)
    if not ok:
        raise ValueError(f"{name}: expected {kind}")


@dataclass
class PoolExtra:
    """Protocol-specific pool parameters; `kind` names the variant."""

    kind: str = "None"
    params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        schema = _EXTRA_SCHEMA.get(self.kind)
        if schema is None:
            raise ValueError(f"unknown pool extra variant: {self.kind}")
        names = {name for name, _ in schema}
        unknown = set(self.params) - names
        if unknown:
            raise ValueError(f"unknown fields for {self.kind}: {sorted(unknown)}")
        for name, kind in schema:
            if name not in self.params:
                raise ValueError(f"missing field {name}")
            _check_param(name, kind, self.params[name])

    def to_json(self) -> str:
        if self.kind == "None":
            return _compact_json("None")
        body = {name: self.params[name] for name, _ in _EXTRA_SCHEMA[self.kind]}
        return _compact_json({self.kind: body})

    @classmethod
    def from_json(cls, text: str) -> "PoolExtra":
        try:
            value = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid pool extra: {exc}") from None
        if value == "None":
            return cls()
        if not isinstance(value, dict) or len(value) != 1:
            raise ValueError(f"invalid pool extra: {text}")
        ((kind, body),) = value.items()
        if kind not in _EXTRA_SCHEMA:
            raise ValueError(f"unknown pool extra variant: {kind}")
        if kind == "None":
            if body is not None:
                raise ValueError("None carries no fields")
            return cls()
        if not isinstance(body, dict):
            raise ValueError(f"invalid fields for {kind}")
        wanted = {name for name, _ in _EXTRA_SCHEMA[kind]}
        return cls(kind, {k: v for k, v in body.items() if k in wanted})


@dataclass(eq=False)
class Pool:
    """A pool; two pools are the same when their object ids are."""

    protocol: Protocol
    pool: str
    tokens: list[Token]
    extra: PoolExtra = field(default_factory=PoolExtra)

    def __post_init__(self) -> None:
        self.pool = _normalize_object_id(self.pool)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pool):
            return NotImplemented
        return self.pool == other.pool

    def __hash__(self) -> int:
        return hash(self.pool)

    def __str__(self) -> str:
        tokens = _compact_json([token.to_dict() for token in self.tokens])
        return f"{self.protocol}|{self.pool}|{tokens}|{self.extra.to_json()}"

    @classmethod
    def parse(cls, value: str) -> "Pool":
        """Read the `protocol|pool|tokens|extra` form produced by str()."""
        parts = value.split("|")
        if len(parts) != 4:
            raise ValueError(f"Invalid pool format: {value}")
        protocol = Protocol.parse(parts[0])
        pool = _normalize_object_id(parts[1])
        try:
            raw_tokens = json.loads(parts[2])
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid tokens: {exc}") from None
        if not isinstance(raw_tokens, list):
            raise ValueError("tokens must be a list")
        tokens = [Token.from_dict(item) for item in raw_tokens]
        return cls(protocol, pool, tokens, PoolExtra.from_json(parts[3]))

    def token0_type(self) -> str:
        return self.tokens[0].token_type

    def token1_type(self) -> str:
        return self.tokens[1].token_type

    def token_count(self) -> int:
        return len(self.tokens)

    def token_index(self, token_type: str) -> int | None:
        return next((i for i, token in enumerate(self.tokens) if token.token_type == token_type), None)

    def token(self, index: int) -> Token | None:
        if 0 <= index < len(self.tokens):
            return self.tokens[index]
        return None

    def token01_pairs(self) -> list[tuple[str, str]]:
        """Every unordered pair of token types, in token order."""
        return [(a.token_type, b.token_type) for a, b in combinations(self.tokens, 2)]


@dataclass
class SwapEvent:
    protocol: Protocol
    pool: str | None
    coins_in: list[str]
    coins_out: list[str]
    amounts_in: list[int]
    amounts_out: list[int]

    def involved_coin_one_side(self) -> str:
        """The first coin in, unless it is SUI, in which case the first coin out."""
        if self.coins_in[0] != SUI_COIN_TYPE:
            return self.coins_in[0]
        return self.coins_out[0]


@dataclass
class PoolCache:
    token_pools: dict[str, set[Pool]] = field(default_factory=dict)
    token01_pools: dict[tuple[str, str], set[Pool]] = field(default_factory=dict)
    pool_map: dict[str, Pool] = field(default_factory=dict)

    def add(self, pool: Pool) -> None:
        for token in pool.tokens:
            self.token_pools.setdefault(token.token_type, set()).add(pool)
        for pair in pool.token01_pairs():
            self.token01_pools.setdefault(pair, set()).add(pool)
        self.pool_map[pool.pool] = pool


class DummyExecutor:
    """An executor that accepts every action and only counts them."""

    def __init__(self) -> None:
        self.executed = 0

    async def execute(self, action: Any) -> None:
        self.executed += 1

    def name(self) -> str:
        return "DummyDexIndexerExecutor"