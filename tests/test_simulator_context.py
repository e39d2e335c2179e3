import asyncio
from types import SimpleNamespace

import pytest

from suimev.simulator.context import SimEpoch, SimulateCtx, SimulateResult, Simulator


def test_sim_epoch_defaults():
    epoch = SimEpoch()
    assert (epoch.epoch_id, epoch.epoch_start_timestamp, epoch.epoch_duration_ms, epoch.gas_price) == (0, 0, 0, 0)


def test_from_system_state_object():
    summary = SimpleNamespace(
        epoch=500, epoch_start_timestamp_ms=1000, epoch_duration_ms=2000, reference_gas_price=750
    )
    epoch = SimEpoch.from_system_state(summary)
    assert epoch == SimEpoch(500, 1000, 2000, 750)


def test_from_system_state_json_mapping():
    summary = {
        "epoch": "500",
        "epochStartTimestampMs": "1000",
        "epochDurationMs": "2000",
        "referenceGasPrice": "750",
    }
    assert SimEpoch.from_system_state(summary) == SimEpoch(500, 1000, 2000, 750)


def test_from_system_state_missing_field():
    with pytest.raises(KeyError):
        SimEpoch.from_system_state({"epoch": 1})


def test_is_stale_within_epoch():
    epoch = SimEpoch(1, 1000, 2000, 1)
    assert epoch.is_stale(1500) is True
    assert epoch.is_stale(2999) is True
    assert epoch.is_stale(3000) is False


def test_is_stale_with_current_time():
    assert SimEpoch(1, 0, 0, 1).is_stale() is False


def test_with_gas_price():
    ctx = SimulateCtx(SimEpoch(1, 2, 3, 4))
    ctx.with_gas_price(1000)
    assert ctx.epoch.gas_price == 1000
    assert ctx.epoch.epoch_id == 1


def test_with_borrowed_coin():
    ctx = SimulateCtx()
    assert ctx.borrowed_coin is None
    coin = object()
    ctx.with_borrowed_coin(coin, 42)
    assert ctx.borrowed_coin == (coin, 42)
    assert ctx.override_objects == []


def test_contexts_do_not_share_epochs():
    first = SimulateCtx()
    second = SimulateCtx()
    first.with_gas_price(9)
    assert second.epoch.gas_price == 0


class _Echo(Simulator):
    async def simulate(self, tx, ctx):
        return SimulateResult(effects=tx, events=[], cache_misses=ctx.epoch.gas_price)

    async def get_object(self, obj_id):
        return {"id": obj_id}

    def name(self):
        return "Echo"


def test_simulator_subclass():
    sim = _Echo()
    result = asyncio.run(sim.simulate("tx", SimulateCtx().with_gas_price(5)))
    assert result.effects == "tx"
    assert result.cache_misses == 5
    assert result.balance_changes == []
    assert asyncio.run(sim.get_object("0x1")) == {"id": "0x1"}
    assert sim.get_object_layout("0x1") is None
    assert sim.name() == "Echo"


def test_simulator_is_abstract():
    with pytest.raises(TypeError):
        Simulator()