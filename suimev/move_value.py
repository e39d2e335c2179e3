"""Annotated Move values and typed field extraction."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class MoveKind(enum.Enum):
    BOOL = "bool"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    U128 = "u128"
    U256 = "u256"
    ADDRESS = "address"
    SIGNER = "signer"
    VECTOR = "vector"
    STRUCT = "struct"


@dataclass(frozen=True)
class MoveValue:
    kind: MoveKind
    value: Any


@dataclass
class MoveStruct:
    type_: str
    fields: dict[str, MoveValue] = field(default_factory=dict)

    def field(self, field_name: str) -> MoveValue | None:
        return self.fields.get(field_name)


class FieldError(ValueError):
    """A field is missing or holds a value of another kind."""


def _field(move_struct: MoveStruct, field_name: str) -> MoveValue:
    value = move_struct.field(field_name)
    if value is None:
        raise FieldError("field not found")
    return value


def _expect(value: MoveValue, kind: MoveKind, what: str) -> Any:
    if value.kind is not kind:
        raise FieldError(f"expected {what}")
    return value.value


def _normalize_address(raw: Any) -> str:
    if isinstance(raw, (bytes, bytearray)):
        if len(raw) != 32:
            raise FieldError("expected address")
        return "0x" + bytes(raw).hex()
    if isinstance(raw, int):
        if raw < 0 or raw >= 1 << 256:
            raise FieldError("expected address")
        return f"0x{raw:064x}"
    if isinstance(raw, str):
        digits = raw[2:] if raw.lower().startswith("0x") else raw
        digits = digits.lower()
        if not digits or len(digits) > 64 or any(c not in "0123456789abcdef" for c in digits):
            raise FieldError("expected address")
        return "0x" + digits.rjust(64, "0")
    raise FieldError("expected address")


def extract_struct_from_move_struct(move_struct: MoveStruct, field_name: str) -> MoveStruct:
    return _expect(_field(move_struct, field_name), MoveKind.STRUCT, "struct")


def extract_vec_from_move_struct(move_struct: MoveStruct, field_name: str) -> list[MoveValue]:
    return list(_expect(_field(move_struct, field_name), MoveKind.VECTOR, "vector"))


def extract_object_id_from_move_struct(move_struct: MoveStruct, field_name: str) -> str:
    return _normalize_address(_expect(_field(move_struct, field_name), MoveKind.ADDRESS, "address"))


def extract_struct_array_from_move_struct(move_struct: MoveStruct, field_name: str) -> list[MoveStruct]:
    items = _expect(_field(move_struct, field_name), MoveKind.VECTOR, "array")
    return [_expect(item, MoveKind.STRUCT, "struct") for item in items]


def extract_u128_from_move_struct(move_struct: MoveStruct, field_name: str) -> int:
    return _expect(_field(move_struct, field_name), MoveKind.U128, "u128")


def extract_u64_from_move_struct(move_struct: MoveStruct, field_name: str) -> int:
    return _expect(_field(move_struct, field_name), MoveKind.U64, "u64")


def extract_u32_from_move_struct(move_struct: MoveStruct, field_name: str) -> int:
    return _expect(_field(move_struct, field_name), MoveKind.U32, "u32")


def extract_bool_from_move_struct(move_struct: MoveStruct, field_name: str) -> bool:
    return _expect(_field(move_struct, field_name), MoveKind.BOOL, "bool")


def extract_u64_vec_from_move_struct(move_struct: MoveStruct, field_name: str) -> list[int]:
    items = _expect(_field(move_struct, field_name), MoveKind.VECTOR, "vector")
    return [_expect(item, MoveKind.U64, "u64") for item in items]


def extract_u128_vec_from_move_struct(move_struct: MoveStruct, field_name: str) -> list[int]:
    items = _expect(_field(move_struct, field_name), MoveKind.VECTOR, "vector")
    return [_expect(item, MoveKind.U128, "u128") for item in items]