"""Epoch and execution context handed to transaction simulators."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from suimev.runtime import current_time_ms

_SUMMARY_KEYS = {
    "epoch_id": ("epoch", "epoch"),
    "epoch_start_timestamp": ("epoch_start_timestamp_ms", "epochStartTimestampMs"),
    "epoch_duration_ms": ("epoch_duration_ms", "epochDurationMs"),
    "gas_price": ("reference_gas_price", "referenceGasPrice"),
}


def _summary_value(summary: Any, snake: str, camel: str) -> int:
    if isinstance(summary, Mapping):
        if snake in summary:
            return int(summary[snake])
        if camel in summary:
            return int(summary[camel])
        raise KeyError(snake)
    return int(getattr(summary, snake))


@dataclass
class SimEpoch:
    epoch_id: int = 0
    epoch_start_timestamp: int = 0
    epoch_duration_ms: int = 0
    gas_price: int = 0

    @classmethod
    def from_system_state(cls, summary: Any) -> "SimEpoch":
        """Build from a system state summary: a mapping (snake or camel case keys) or an object."""
        values = {name: _summary_value(summary, snake, camel) for name, (snake, camel) in _SUMMARY_KEYS.items()}
        return cls(**values)

    def is_stale(self, now_ms: int | None = None) -> bool:
        """True while `now_ms` is before the end of the epoch."""
        now = current_time_ms() if now_ms is None else now_ms
        return now < self.epoch_start_timestamp + self.epoch_duration_ms


@dataclass
class SimulateCtx:
    epoch: SimEpoch = field(default_factory=SimEpoch)
    override_objects: list[Any] = field(default_factory=list)
    # (coin, amount) assumed to be held, e.g. flash-loaned, during execution
    borrowed_coin: tuple[Any, int] | None = None

    def with_borrowed_coin(self, coin: Any, amount: int) -> "SimulateCtx":
        self.borrowed_coin = (coin, amount)
        return self

    def with_gas_price(self, gas_price: int) -> "SimulateCtx":
        self.epoch.gas_price = gas_price
        return self


@dataclass
class SimulateResult:
    effects: Any
    events: Any
    object_changes: list[Any] = field(default_factory=list)
    balance_changes: list[Any] = field(default_factory=list)
    cache_misses: int = 0


class Simulator(abc.ABC):
    """Executes transactions against some view of chain state."""

    # object id -> struct layout; simulators that can resolve layouts provide them
    object_layouts: Mapping[str, Any] = MappingProxyType({})

    @abc.abstractmethod
    async def simulate(self, tx: Any, ctx: SimulateCtx) -> SimulateResult: ...

    @abc.abstractmethod
    async def get_object(self, obj_id: str) -> Any | None: ...

    @abc.abstractmethod
    def name(self) -> str: ...

    def get_object_layout(self, obj_id: str) -> Any | None:
        """The struct layout of the object, or None when it is not known."""
        return self.object_layouts.get(obj_id)