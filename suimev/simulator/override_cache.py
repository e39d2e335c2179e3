"""An object store that serves overridden objects first and a backing store second."""

from __future__ import annotations

import enum
import hashlib
import logging
import threading
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence, Tuple, Union

from suimev.runtime import current_time_ms

log = logging.getLogger(__name__)

OBJECT_START_VERSION = 1
SUI_CLOCK_OBJECT_ID = "0x" + "6".rjust(64, "0")
CLOCK_TYPE = "0x2::clock::Clock"
GENESIS_MARKER = "0" * 64

_OWNER_KINDS = ("address", "object", "shared", "immutable")
_U64_MAX = (1 << 64) - 1

ObjectRef = Tuple[str, int, str]
ObjectKey = Tuple[str, int]


def _normalize_id(value: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"invalid object id: {value!r}")
    digits = value[2:] if value[:2].lower() == "0x" else value
    digits = digits.lower()
    if not digits or len(digits) > 64 or any(c not in "0123456789abcdef" for c in digits):
        raise ValueError(f"invalid object id: {value!r}")
    return "0x" + digits.rjust(64, "0")


@dataclass(frozen=True)
class Owner:
    """Who owns an object: `address`, `object` (a parent id), `shared` (initial version) or `immutable`."""

    kind: str
    value: Any = None

    def __post_init__(self) -> None:
        if self.kind not in _OWNER_KINDS:
            raise ValueError(f"unknown owner kind: {self.kind}")
        if self.kind in ("address", "object"):
            object.__setattr__(self, "value", _normalize_id(self.value))
        elif self.kind == "shared":
            if isinstance(self.value, bool) or not isinstance(self.value, int) or self.value < 0:
                raise ValueError("a shared owner needs its initial shared version")
        elif self.value is not None:
            raise ValueError("an immutable owner carries no value")


@dataclass(frozen=True)
class SimObject:
    id: str
    version: int
    owner: Owner
    type_: str = ""
    contents: bytes = b""
    previous_transaction: str = GENESIS_MARKER

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", _normalize_id(self.id))
        object.__setattr__(self, "contents", bytes(self.contents))

    def object_ref(self) -> ObjectRef:
        """(id, version, digest), the digest covering every part of the object."""
        hasher = hashlib.blake2b(digest_size=32)
        for part in (
            self.id,
            str(self.version),
            self.owner.kind,
            repr(self.owner.value),
            self.type_,
            self.previous_transaction,
        ):
            encoded = part.encode("utf-8")
            hasher.update(len(encoded).to_bytes(8, "little"))
            hasher.update(encoded)
        hasher.update(self.contents)
        return (self.id, self.version, hasher.hexdigest())


class ReadKind(enum.Enum):
    OBJECT = "object"
    CONSENSUS_STREAM_ENDED = "consensus_stream_ended"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ObjectReadResult:
    object_id: str
    kind: ReadKind = ReadKind.OBJECT
    object: Optional[SimObject] = None
    initial_shared_version: Optional[int] = None
    mutable: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "object_id", _normalize_id(self.object_id))
        if self.kind is ReadKind.OBJECT:
            if self.object is None or self.object.id != self.object_id:
                raise ValueError("an object read result must hold the object it names")


class ObjectNotFound(LookupError):
    def __init__(self, object_id: str, version: Optional[int] = None, reason: str = "object not found") -> None:
        self.object_id = object_id
        self.version = version
        super().__init__(f"{reason}: {object_id}" + ("" if version is None else f", version {version}"))


class InvalidChildObjectAccess(PermissionError):
    def __init__(self, object_id: str, given_parent: str, actual_owner: Owner) -> None:
        self.object_id = object_id
        self.given_parent = given_parent
        self.actual_owner = actual_owner
        super().__init__(
            f"invalid child object access: {object_id}, given parent {given_parent}, actual owner {actual_owner}"
        )


def clock_object(now_ms: int) -> SimObject:
    """The shared clock object reading `now_ms`."""
    if isinstance(now_ms, bool) or not isinstance(now_ms, int) or not 0 <= now_ms <= _U64_MAX:
        raise ValueError(f"timestamp must be a u64: {now_ms!r}")
    contents = bytes.fromhex(SUI_CLOCK_OBJECT_ID[2:]) + now_ms.to_bytes(8, "little")
    return SimObject(
        id=SUI_CLOCK_OBJECT_ID,
        version=OBJECT_START_VERSION,
        owner=Owner("shared", OBJECT_START_VERSION),
        type_=CLOCK_TYPE,
        contents=contents,
    )


Tombstone = Tuple[ObjectKey, Union[SimObject, ObjectRef]]


class OverrideCache:
    """Overrides answer first; anything they do not hold goes to the optional fallback store."""

    def __init__(self, fallback: Any = None, overrides: Iterable[ObjectReadResult] = ()) -> None:
        self.fallback = fallback
        self.overrides: list[ObjectReadResult] = list(overrides)
        self._versioned_cache: dict[ObjectKey, SimObject] = {}
        self._lock = threading.Lock()

    @property
    def versioned_cache(self) -> dict[ObjectKey, SimObject]:
        with self._lock:
            return dict(self._versioned_cache)

    def get_override(self, object_id: str) -> Optional[ObjectReadResult]:
        object_id = _normalize_id(object_id)
        if object_id == SUI_CLOCK_OBJECT_ID:
            return ObjectReadResult(
                SUI_CLOCK_OBJECT_ID,
                ReadKind.OBJECT,
                clock_object(current_time_ms()),
                initial_shared_version=OBJECT_START_VERSION,
                mutable=True,
            )
        return next((o for o in self.overrides if o.object_id == object_id), None)

    def _checked_override(self, object_id: str) -> Optional[ObjectReadResult]:
        result = self.get_override(object_id)
        if result is not None and result.kind is ReadKind.CANCELLED:
            raise RuntimeError("override object is in cancelled transaction")
        return result

    def get_override_object(self, object_id: str) -> Optional[SimObject]:
        result = self._checked_override(object_id)
        if result is None or result.kind is ReadKind.CONSENSUS_STREAM_ENDED:
            return None
        return result.object

    def get_versioned_object_for_comparison(self, object_id: str, version: int) -> Optional[SimObject]:
        with self._lock:
            return self._versioned_cache.get((_normalize_id(object_id), version))

    def get_package_object(self, object_id: str) -> Optional[SimObject]:
        result = self._checked_override(object_id)
        if result is not None:
            return result.object if result.kind is ReadKind.OBJECT else None
        log.warning("[get_package_object] override missing: %s", object_id)
        return self.fallback.get_package_object(object_id) if self.fallback is not None else None

    def get_object(self, object_id: str) -> Optional[SimObject]:
        result = self._checked_override(object_id)
        if result is not None:
            return result.object if result.kind is ReadKind.OBJECT else None
        log.warning("[get_object] override missing: %s", object_id)
        if self.fallback is None:
            return None
        obj = self.fallback.get_object(object_id)
        if obj is not None:
            with self._lock:
                self._versioned_cache[(obj.id, obj.version)] = obj
        return obj

    def get_latest_object_ref_or_tombstone(self, object_id: str) -> Optional[ObjectRef]:
        obj = self.get_override_object(object_id)
        if obj is not None:
            return obj.object_ref()
        log.warning("[get_latest_object_ref_or_tombstone] override missing: %s", object_id)
        # a deleted override has no digest of its own, so the fallback answers for it
        if self.fallback is None:
            return None
        return self.fallback.get_latest_object_ref_or_tombstone(object_id)

    def get_latest_object_or_tombstone(self, object_id: str) -> Optional[Tombstone]:
        """((id, version), object) for a live object, ((id, version), ref) for a deleted one."""
        result = self._checked_override(object_id)
        if result is not None:
            if result.kind is ReadKind.OBJECT:
                ref = result.object.object_ref()
                return (ref[0], ref[1]), result.object
            if self.fallback is None:
                return None
            undeleted = self.fallback.get_object(object_id)
            if undeleted is None:
                return None
            ref = undeleted.object_ref()
            return (ref[0], ref[1]), ref
        log.warning("[get_latest_object_or_tombstone] override missing: %s", object_id)
        if self.fallback is None:
            return None
        return self.fallback.get_latest_object_or_tombstone(object_id)

    def get_object_by_key(self, object_id: str, version: int) -> Optional[SimObject]:
        result = self._checked_override(object_id)
        if result is not None:
            if result.kind is ReadKind.CONSENSUS_STREAM_ENDED:
                return None
            if result.object.version == version:
                return result.object
        log.warning("[get_object_by_key] override missing: %s, version: %s", object_id, version)
        if self.fallback is None:
            return None
        return self.fallback.get_object_by_key(object_id, version)

    def multi_get_objects_by_key(self, object_keys: Sequence[ObjectKey]) -> list[Optional[SimObject]]:
        return [self.get_object_by_key(object_id, version) for object_id, version in object_keys]

    def object_exists_by_key(self, object_id: str, version: int) -> bool:
        return self.get_object_by_key(object_id, version) is not None

    def multi_object_exists_by_key(self, object_keys: Sequence[ObjectKey]) -> list[bool]:
        return [self.object_exists_by_key(object_id, version) for object_id, version in object_keys]

    def find_object_lt_or_eq_version(self, object_id: str, version: int) -> Optional[SimObject]:
        obj = self.get_object(object_id)
        if obj is not None and obj.version <= version:
            return obj
        return None

    def read_child_object(self, parent: str, child: str, child_version_upper_bound: int) -> Optional[SimObject]:
        child_object = self.find_object_lt_or_eq_version(child, child_version_upper_bound)
        if child_object is None:
            return None
        parent = _normalize_id(parent)
        if child_object.owner != Owner("object", parent):
            raise InvalidChildObjectAccess(child_object.id, parent, child_object.owner)
        return child_object

    def get_live_objref(self, object_id: str) -> ObjectRef:
        result = self._checked_override(object_id)
        if result is not None:
            if result.kind is ReadKind.OBJECT:
                return result.object.object_ref()
            raise ObjectNotFound(_normalize_id(object_id))
        log.warning("[get_live_objref] override missing: %s", object_id)
        if self.fallback is None:
            raise RuntimeError("No fallback")
        return self.fallback.get_live_objref(object_id)

    def check_owned_objects_are_live(self, owned_object_refs: Iterable[ObjectRef]) -> None:
        for object_id, version, _digest in owned_object_refs:
            if self.get_object_by_key(object_id, version) is None:
                raise ObjectNotFound(object_id, version, "object version unavailable for consumption")