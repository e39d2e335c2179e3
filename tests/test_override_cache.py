import pytest

from suimev.runtime import current_time_ms
from suimev.simulator.override_cache import (
    InvalidChildObjectAccess,
    ObjectNotFound,
    ObjectReadResult,
    OverrideCache,
    Owner,
    ReadKind,
    SimObject,
    clock_object,
)

ALICE = "0xa1"
PARENT = "0xbeef"
CLOCK_ID = "0x" + "0" * 63 + "6"


def make(object_id, version=1, owner=None, contents=b"data"):
    return SimObject(object_id, version, owner or Owner("address", ALICE), "0x2::coin::Coin", contents)


def override(obj):
    return ObjectReadResult(obj.id, ReadKind.OBJECT, obj)


class FakeStore:
    def __init__(self, *objects):
        self.objects = {}
        for obj in objects:
            self.objects.setdefault(obj.id, {})[obj.version] = obj
        self.calls = []

    def _latest(self, object_id):
        versions = self.objects.get(SimObject(object_id, 0, Owner("immutable")).id)
        return versions[max(versions)] if versions else None

    def get_object(self, object_id):
        self.calls.append(("get_object", object_id))
        return self._latest(object_id)

    def get_package_object(self, object_id):
        self.calls.append(("get_package_object", object_id))
        return self._latest(object_id)

    def get_object_by_key(self, object_id, version):
        self.calls.append(("get_object_by_key", object_id, version))
        versions = self.objects.get(SimObject(object_id, 0, Owner("immutable")).id, {})
        return versions.get(version)

    def get_latest_object_ref_or_tombstone(self, object_id):
        obj = self._latest(object_id)
        return obj.object_ref() if obj else None

    def get_latest_object_or_tombstone(self, object_id):
        obj = self._latest(object_id)
        return ((obj.id, obj.version), obj) if obj else None

    def get_live_objref(self, object_id):
        obj = self._latest(object_id)
        if obj is None:
            raise ObjectNotFound(object_id)
        return obj.object_ref()


def test_override_is_served_without_fallback():
    obj = make("0x1", 5)
    store = FakeStore(make("0x1", 9))
    cache = OverrideCache(store, [override(obj)])
    assert cache.get_object("0x1") == obj
    assert store.calls == []


def test_missing_override_goes_to_fallback_and_is_recorded():
    fallback_obj = make("0x2", 7)
    cache = OverrideCache(FakeStore(fallback_obj), [])
    assert cache.get_object("0x2") == fallback_obj
    assert cache.get_versioned_object_for_comparison("0x2", 7) == fallback_obj
    assert cache.get_versioned_object_for_comparison("0x2", 6) is None


def test_without_fallback_missing_objects_are_none():
    cache = OverrideCache(None, [])
    assert cache.get_object("0x3") is None
    assert cache.get_package_object("0x3") is None
    assert cache.get_latest_object_or_tombstone("0x3") is None
    with pytest.raises(RuntimeError, match="No fallback"):
        cache.get_live_objref("0x3")


def test_clock_object_layout():
    clock = clock_object(1234)
    assert clock.id == CLOCK_ID
    assert clock.contents == bytes.fromhex("00" * 31 + "06") + (1234).to_bytes(8, "little")
    assert clock.owner == Owner("shared", 1)
    assert clock.version == 1


def test_clock_override_reads_current_time():
    cache = OverrideCache(None, [])
    before = current_time_ms()
    result = cache.get_override(CLOCK_ID)
    after = current_time_ms()
    assert result.mutable is True
    assert result.initial_shared_version == 1
    stamp = int.from_bytes(result.object.contents[32:], "little")
    assert before <= stamp <= after


def test_deleted_override_hides_object():
    live = make("0x4", 3)
    cache = OverrideCache(FakeStore(live), [ObjectReadResult("0x4", ReadKind.CONSENSUS_STREAM_ENDED)])
    assert cache.get_object("0x4") is None
    assert cache.get_object_by_key("0x4", 3) is None
    with pytest.raises(ObjectNotFound):
        cache.get_live_objref("0x4")
    assert cache.get_latest_object_ref_or_tombstone("0x4") == live.object_ref()
    key, ref = cache.get_latest_object_or_tombstone("0x4")
    assert key == (live.id, 3)
    assert ref == live.object_ref()


def test_object_by_key_version_mismatch_falls_back():
    old = make("0x5", 2)
    cache = OverrideCache(FakeStore(old), [override(make("0x5", 4))])
    assert cache.get_object_by_key("0x5", 2) == old
    assert cache.get_object_by_key("0x5", 4).version == 4
    assert cache.multi_object_exists_by_key([("0x5", 2), ("0x5", 4), ("0x5", 3)]) == [True, True, False]
    assert cache.multi_get_objects_by_key([("0x5", 3)]) == [None]


def test_find_object_lt_or_eq_version():
    cache = OverrideCache(None, [override(make("0x6", 10))])
    assert cache.find_object_lt_or_eq_version("0x6", 10).version == 10
    assert cache.find_object_lt_or_eq_version("0x6", 9) is None


def test_read_child_object_checks_parent():
    child = make("0x7", 1, Owner("object", PARENT))
    cache = OverrideCache(None, [override(child)])
    assert cache.read_child_object(PARENT, "0x7", 5) == child
    with pytest.raises(InvalidChildObjectAccess):
        cache.read_child_object("0xcafe", "0x7", 5)
    assert cache.read_child_object(PARENT, "0x8", 5) is None


def test_check_owned_objects_are_live():
    obj = make("0x9", 2)
    cache = OverrideCache(None, [override(obj)])
    cache.check_owned_objects_are_live([obj.object_ref()])
    with pytest.raises(ObjectNotFound) as info:
        cache.check_owned_objects_are_live([obj.object_ref(), ("0x9", 3, "x")])
    assert info.value.version == 3


def test_cancelled_override_is_an_error():
    cache = OverrideCache(None, [ObjectReadResult("0xa", ReadKind.CANCELLED)])
    with pytest.raises(RuntimeError, match="cancelled"):
        cache.get_object("0xa")


def test_live_objref_and_tombstone_for_override():
    obj = make("0xb", 4)
    cache = OverrideCache(None, [override(obj)])
    assert cache.get_live_objref("0xb") == obj.object_ref()
    assert cache.get_latest_object_or_tombstone("0xb") == ((obj.id, 4), obj)
    assert cache.get_package_object("0xb") == obj


def test_object_ref_depends_on_contents_and_version():
    a = make("0xc", 1, contents=b"one")
    assert a.object_ref() == make("0xc", 1, contents=b"one").object_ref()
    assert a.object_ref()[2] != make("0xc", 1, contents=b"two").object_ref()[2]
    assert a.object_ref()[2] != make("0xc", 2, contents=b"one").object_ref()[2]
    assert a.object_ref()[:2] == ("0x" + "c".rjust(64, "0"), 1)


def test_read_result_must_hold_named_object():
    with pytest.raises(ValueError):
        ObjectReadResult("0xd", ReadKind.OBJECT, make("0xe"))
    with pytest.raises(ValueError):
        Owner("shared")