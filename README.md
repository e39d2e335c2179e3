# suimev

Building blocks for trading bots on the Sui network, written for asyncio.

## What is in the package

- `suimev.shio.types`: the Shio auction feed's messages. `parse_shio_item`
  turns a decoded JSON message into `AuctionStarted`, `AuctionEnded` or, for
  anything else, `DummyItem`. Every item answers `tx_digest()`, `gas_price()`,
  `deadline_timestamp_ms()`, `events()`, `created_mutated_objects()` and
  `type_name()`. The module also holds `SHIO_FEED_URL`, `SHIO_JSON_RPC_URL`
  and `SHIO_GLOBAL_STATES`.
- `suimev.shio.conn`: `ShioConnection` keeps a websocket to the feed open,
  retrying a failed connect every five seconds and raising `ConnectionError`
  once the retries are used up. It sends bids taken from one queue and puts
  parsed items on another. `new_shio_conn` starts one in the background and
  returns both queues. `ShioCollector.get_event_stream()` yields the items.
- `suimev.shio.executor`: `Ed25519KeyPair` signs with a flag byte, the
  signature and the public key. `ShioExecutor` encodes a signed bid and puts
  it on the connection's bid queue; `ShioRPCExecutor` posts it as a
  `shio_submitBid` JSON-RPC request and returns the status and body.
  `new_shio_collector_and_executor` wires both to a single connection.
  `base58_encode` and `transaction_intent_digest` are exposed as well.
- `suimev.dex.types`: `Protocol`, `Token`, `PoolExtra`, `Pool`, `SwapEvent`,
  an in-memory `PoolCache` and a `DummyExecutor`. A pool is written as one
  line, `protocol|pool_id|tokens_json|extra_json`, by `str()` and read back
  by `Pool.parse`. Pools compare and hash by object id.
- `suimev.simulator.context`: `SimEpoch`, `SimulateCtx`, `SimulateResult` and
  the abstract `Simulator` interface (`simulate`, `get_object`, `name`,
  `get_object_layout`).
- `suimev.simulator.override_cache`: `OverrideCache` answers object reads
  from a list of `ObjectReadResult` overrides first and from an optional
  fallback store second. The clock object is always served with the current
  time. Objects read from the fallback are remembered by id and version.
- `suimev.move_value`: `MoveValue`, `MoveStruct` and typed field extractors
  such as `extract_u64_from_move_struct`; a missing field or one of another
  kind raises `FieldError`.
- `suimev.link`: Markdown links to the chain explorer for transactions,
  objects, accounts, coins and checkpoints.
- `suimev.coin`: `is_native_coin` and `format_sui_with_symbol`.
- `suimev.object_pool`: `ObjectPool` builds objects in parallel threads and
  `get()` returns the one with the fewest references held.
- `suimev.logger`: console and hourly rotating `./logs/*.log` handlers with
  `target=level` directives; `init_console_logger_with_directives` also
  reads directives from the `SUIMEV_LOG` environment variable.
- `suimev.version`: `build_version()` runs `git` and returns
  `<branch>-<commit>[-dirty]@<date>`.
- `suimev.runtime`: `current_time_ms`, `start_heartbeat` (logs one start
  line in a background thread) and `set_panic_hook`, which logs uncaught
  exceptions from any thread under the `panic_hook` logger, with long
  command-line arguments redacted. The chat report it can also send is only
  made when the module's `TELEGRAM_BOT_TOKEN` is set; it is empty by default.

Python 3.10 or later is required.

## Examples

Write a pool as a line and read it back:

```python
from suimev.dex.types import Pool, PoolExtra, Protocol, Token

pool = Pool(
    Protocol.CETUS,
    "0x5",
    [Token("0x2::sui::SUI", 9), Token("0xabc::usdc::USDC", 6)],
    PoolExtra("Cetus", {"fee_rate": 2500}),
)
line = str(pool)
assert Pool.parse(line) == pool
print(pool.token01_pairs())   # [('0x2::sui::SUI', '0xabc::usdc::USDC')]
```

An unknown protocol name or a malformed line raises `ValueError`.

Read the Shio feed:

```python
import asyncio
from suimev.shio.conn import ShioCollector
from suimev.shio.types import SHIO_FEED_URL

async def watch():
    collector = await ShioCollector.new_without_executor(SHIO_FEED_URL, 3)
    async for item in collector.get_event_stream():
        print(item.type_name(), item.tx_digest())

asyncio.run(watch())
```

Encode a bid (the seed here is a made-up placeholder):

```python
import asyncio
from suimev.shio.executor import Ed25519KeyPair, ShioExecutor

keypair = Ed25519KeyPair.from_seed(bytes(32))
executor = ShioExecutor(keypair, asyncio.Queue())
bid = executor.encode_bid(b"\x00\x01", 1_000, bytes(32))
print(sorted(bid))   # ['bidAmount', 'oppTxDigest', 'sig', 'txData']
```

Serve overridden objects:

```python
from suimev.simulator.override_cache import ObjectReadResult, OverrideCache, Owner, SimObject

obj = SimObject("0x42", 7, Owner("address", "0x1"))
cache = OverrideCache(None, [ObjectReadResult(obj.id, object=obj)])
assert cache.get_object("0x42") == obj
assert cache.get_object_by_key("0x42", 8) is None
```

Amounts and links:

```python
from suimev import coin, link

coin.format_sui_with_symbol(1_500_000_000)   # "1.5 SUI"
link.coin("0x2::sui::SUI")
```

## What the package does not do

- It does not execute transactions. `Simulator` is an interface only; no
  simulator that runs transactions against chain state is included, and
  `OverrideCache` is a store to build one on.
- It does not index pools from the chain or decode swap events from it:
  `Pool`, `SwapEvent` and `PoolCache` hold what a caller gives them.
- It does not query a node for coins, balances or objects.
- It has no command-line program.

## Tests

The test suite uses pytest and pytest-asyncio, available through the
`test` extra.