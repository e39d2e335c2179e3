"""Messages of the Shio auction feed and the feed's fixed endpoints."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

SHIO_FEED_URL = "wss://rpc.getshio.com/feed"
SHIO_JSON_RPC_URL = "https://rpc.getshio.com"

# (object id, initial shared version)
SHIO_GLOBAL_STATES: tuple[tuple[str, int], ...] = (
    ("0xc32ce42eac951759666cbc993646b72387ec2708a2917c2c6fb7d21f00108c18", 72869622),
    ("0x0289acae0edcdf1fe3aedc2e886bc23064d41c359e0179a18152a64d1c1c2b3e", 327637282),
    ("0x03132160e8c2c45208abf3ccf165e82edcc42fee2e614afe54582f9740a808b8", 327637282),
    ("0x072ae7307459e535379f422995a0d10132f12a3450298f8cf0cc07bd164f9999", 327637282),
    ("0x1c1a96a2f4a34ea09ab15b8ff98f4b6b4338ce89f4158eb7d3eb2cd4dcbd6d86", 327637282),
    ("0x20d76f37ad9f2421a9e6afaf3bb204250b1c2241c50e8a955e86a1a48767d06f", 327637282),
    ("0x213ed368233cc7480fcb6336e70c5ae7ee106b2317ba02ccb5d0478e45bcc046", 327637282),
    ("0x22ce1e80937354eba5549fed2937dc6e2b24026d03505bb51a3e4a64aa4142f6", 327637282),
    ("0x26188cb7ce5ae633279f440f66081cb65cc585e428de18e194f8843e866f799f", 327637282),
    ("0x38642f01422480128388d3e2948d3dc1b2680f9914077edb6bd3451ae1c5bcf0", 327637282),
    ("0x3dd85b6424aea1cae9eff6e55456ca783e056226325f1362106eca8b3ed04ca0", 327637282),
    ("0x42f8adc490542369d9c3b95e9f6eb70b2583102900feb7e103072ed49ba7fc3d", 327637282),
    ("0x46b8158c82fa6bda7230d31a127d934c7295a0042083b4900f3096e9191f6f3f", 327637282),
    ("0x6ebac88a8c3f7a4a9fb05ea49d188a1fe8520ae59ee736e0473004d3033512a4", 327637282),
    ("0x6f55ad6cb40cfc124c11b11c19be0a80237b104acd955e7b52ccb7bf9046fe33", 327637282),
    ("0x71aafb8bac986e82e5f78846bf3b36c2a82505585625207324140227a27ff279", 327637282),
    ("0x7fe9b08680d4179de5672f213b863525b21f10604ca161538075e9338d1d2324", 327637282),
    ("0x81538ef2909a3e0dd3d7f38bcbee191509bae4e8666272938ced295672e2ee8d", 327637282),
    ("0x828eb6b3354ad68a23dd792313a16a0d888b7ea4fdb884bb22bd569f8e61319e", 327637282),
    ("0x9705a332b8c1650dd7fe687ef9f9a9638afb51c30c0b34db150d60b920bc07eb", 327637282),
    ("0x9918f73797a9390e9888b55454f2b31bc01de1a4634acab08f80641c4248e8a5", 327637282),
    ("0x9cd4c08bdf2e132ec2cc77b0f03be60a94951e046d8e82ed5494f44e609edd2f", 327637282),
    ("0xac8ce2033571140509788337c8a1f3aa8941a320ecd7047acda310d39cad9e03", 327637282),
    ("0xbcd4527035265461a9a7b4f1e57c63ea7a6bdf0dc223c66033c218d880f928b1", 327637282),
    ("0xbfdb691b8cc0b3c3a3b7a654f6682f3e53b164d9ee00b9582cdb4d0a353440a9", 327637282),
    ("0xc2559d5c52ae04837ddf943a8c2cd53a5a0b512cee615d30d3abe25aa339465e", 327637282),
    ("0xc56db634d02511e66d7ca1254312b71c60d64dc44bf67ea46b922c52d8aebba6", 327637282),
    ("0xc84545cbff1b36b874ab2b69d11a3d108f23562e87550588c0bda335b27101e0", 327637282),
    ("0xcc141659b5885043f9bfcfe470064819ab9ac667953bcedd1000e0652e90ee76", 327637282),
    ("0xef6bf4952968d25d3e79f7e4db1dc38f2e9d99d61ad38f3829acb4100fe6383a", 327637282),
    ("0xf2ed8d00ef829de5c4a3c5adf2d6b0f41f7fec005fb9c88e5616b98173b2fd66", 327637282),
    ("0xfce73f3c32c3f56ddb924a04cabd44dd870b72954bbe7c3d7767c3b8c25c4326", 327637282),
)

_U64_MAX = (1 << 64) - 1

T = TypeVar("T")


class _Invalid(ValueError):
    """A feed message does not have the expected shape."""


@dataclass(frozen=True)
class ShioEventId:
    event_seq: str
    tx_digest: str


@dataclass(frozen=True)
class ShioEvent:
    event_type: str
    bcs: str  # base64
    event_id: ShioEventId
    package_id: str
    parsed_json: Any
    sender: str
    transaction_module: str


@dataclass(frozen=True)
class ShioObjectContent:
    data_type: str
    has_public_transfer: bool


@dataclass(frozen=True)
class ShioObject:
    id: str
    object_type: str
    owner: Any
    content: ShioObjectContent
    object_bcs: str  # base64

    def data_type(self) -> str:
        return self.content.data_type

    def has_public_transfer(self) -> bool:
        return self.content.has_public_transfer


@dataclass(frozen=True)
class SideEffects:
    gas_usage: int
    created_objects: list[ShioObject] = field(default_factory=list)
    mutated_objects: list[ShioObject] = field(default_factory=list)
    events: list[ShioEvent] = field(default_factory=list)


class ShioItem:
    """One message of the feed."""

    __slots__ = ()

    def tx_digest(self) -> str:
        return "dummy"

    def gas_price(self) -> int:
        return 0

    def deadline_timestamp_ms(self) -> int:
        return 0

    def events(self) -> list[ShioEvent]:
        return []

    def created_mutated_objects(self) -> list[ShioObject]:
        return []

    def type_name(self) -> str:
        return "dummy"


@dataclass(frozen=True)
class AuctionStarted(ShioItem):
    digest: str
    tx_gas_price: int
    deadline_ms: int
    side_effects: SideEffects

    def tx_digest(self) -> str:
        return self.digest

    def gas_price(self) -> int:
        return self.tx_gas_price

    def deadline_timestamp_ms(self) -> int:
        return self.deadline_ms

    def events(self) -> list[ShioEvent]:
        return list(self.side_effects.events)

    def created_mutated_objects(self) -> list[ShioObject]:
        return [*self.side_effects.created_objects, *self.side_effects.mutated_objects]

    def type_name(self) -> str:
        return "auctionStarted"


@dataclass(frozen=True)
class AuctionEnded(ShioItem):
    digest: str
    winning_bid_amount: int

    def tx_digest(self) -> str:
        return "auctionEnded"

    def type_name(self) -> str:
        return "auctionEnded"


@dataclass(frozen=True)
class DummyItem(ShioItem):
    """A message that is neither a started nor an ended auction."""

    value: Any


def _mapping(value: Any) -> dict:
    if not isinstance(value, dict):
        raise _Invalid("expected an object")
    return value


def _required(data: dict, key: str) -> Any:
    if key not in data:
        raise _Invalid(f"missing field {key}")
    return data[key]


def _string(data: dict, key: str) -> str:
    value = _required(data, key)
    if not isinstance(value, str):
        raise _Invalid(f"{key}: expected a string")
    return value


def _u64(data: dict, key: str) -> int:
    value = _required(data, key)
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U64_MAX:
        raise _Invalid(f"{key}: expected u64")
    return value


def _boolean(data: dict, key: str) -> bool:
    value = _required(data, key)
    if not isinstance(value, bool):
        raise _Invalid(f"{key}: expected a boolean")
    return value


def _list_of(data: dict, key: str, parse: Callable[[Any], T]) -> list[T]:
    if key not in data:
        return []
    items = data[key]
    if not isinstance(items, list):
        raise _Invalid(f"{key}: expected a list")
    return [parse(item) for item in items]


def _parse_event(value: Any) -> ShioEvent:
    data = _mapping(value)
    event_id = _mapping(_required(data, "id"))
    return ShioEvent(
        event_type=_string(data, "type"),
        bcs=_string(data, "bcs"),
        event_id=ShioEventId(event_seq=_string(event_id, "eventSeq"), tx_digest=_string(event_id, "txDigest")),
        package_id=_string(data, "packageId"),
        parsed_json=data.get("parsedJson"),
        sender=_string(data, "sender"),
        transaction_module=_string(data, "transactionModule"),
    )


def _parse_object(value: Any) -> ShioObject:
    data = _mapping(value)
    content = _mapping(_required(data, "content"))
    return ShioObject(
        id=_string(data, "id"),
        object_type=_string(data, "objectType"),
        owner=_required(data, "owner"),
        content=ShioObjectContent(
            data_type=_string(content, "dataType"),
            has_public_transfer=_boolean(content, "hasPublicTransfer"),
        ),
        object_bcs=_string(data, "objectBcs"),
    )


def _parse_side_effects(value: Any) -> SideEffects:
    data = _mapping(value)
    return SideEffects(
        gas_usage=_u64(data, "gasUsage"),
        created_objects=_list_of(data, "createdObjects", _parse_object),
        mutated_objects=_list_of(data, "mutatedObjects", _parse_object),
        events=_list_of(data, "events", _parse_event),
    )


def _parse(value: Any) -> ShioItem:
    data = _mapping(value)
    if len(data) != 1:
        raise _Invalid("expected exactly one message tag")
    ((tag, body),) = data.items()
    body = _mapping(body)
    if tag == "auctionStarted":
        return AuctionStarted(
            digest=_string(body, "txDigest"),
            tx_gas_price=_u64(body, "gasPrice"),
            deadline_ms=_u64(body, "deadlineTimestampMs"),
            side_effects=_parse_side_effects(_required(body, "sideEffects")),
        )
    if tag == "auctionEnded":
        return AuctionEnded(digest=_string(body, "txDigest"), winning_bid_amount=_u64(body, "winningBidAmount"))
    raise _Invalid(f"unknown message tag {tag}")


def parse_shio_item(value: Any) -> ShioItem:
    """Turn a decoded JSON message into an item; anything unexpected becomes a DummyItem."""
    try:
        return _parse(value)
    except _Invalid:
        return DummyItem(value)