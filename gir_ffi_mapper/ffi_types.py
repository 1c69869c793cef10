#!/usr/bin/env python3
"""
FFI descriptors: the wire representation of a mapped type.

Every mapping result carries exactly one descriptor from the closed set below.
The descriptor tells the native-call marshaler how many bytes to read or write,
how to interpret them, and who releases the memory afterwards.

Value variants (int, float, boolean, undefined, struct) carry no ownership.
Reference-counted or allocated variants (string, gobject, boxed, fundamental,
array, hashtable) always carry one.

`to_dict()` produces the JSON shape consumed by the marshaler, using its
camelCase keys ('itemType', 'sizeParamIndex', 'getTypeFn', ...). Optional keys
that are unset are omitted.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, Optional, Tuple, Union


class Ownership(Enum):
    FULL = "full"
    BORROWED = "borrowed"


class ArrayKind(Enum):
    # Zero-terminated / implicit length
    ARRAY = "array"
    GLIST = "glist"
    GSLIST = "gslist"
    GPTRARRAY = "gptrarray"
    GARRAY = "garray"
    FIXED = "fixed"
    SIZED = "sized"


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# --------------------------
# Value variants
# --------------------------

@dataclass(frozen=True)
class IntType:
    type: ClassVar[str] = "int"
    size: int = 32
    unsigned: bool = False
    # Set for enums/flags with a runtime type, so the emitter can register it
    library: Optional[str] = None
    get_type_fn: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "type": self.type,
            "size": self.size,
            "unsigned": self.unsigned,
            "library": self.library,
            "getTypeFn": self.get_type_fn,
        })


@dataclass(frozen=True)
class FloatType:
    type: ClassVar[str] = "float"
    size: int = 64

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "size": self.size}


@dataclass(frozen=True)
class BooleanType:
    type: ClassVar[str] = "boolean"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type}


@dataclass(frozen=True)
class UndefinedType:
    type: ClassVar[str] = "undefined"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type}


@dataclass(frozen=True)
class StructType:
    """
    Plain C struct passed by pointer with value semantics.
    """
    type: ClassVar[str] = "struct"
    inner_type: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "innerType": self.inner_type}


# --------------------------
# Owned variants
# --------------------------

@dataclass(frozen=True)
class StringType:
    type: ClassVar[str] = "string"
    ownership: Ownership = Ownership.FULL

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "ownership": self.ownership.value}


@dataclass(frozen=True)
class GObjectType:
    type: ClassVar[str] = "gobject"
    ownership: Ownership = Ownership.FULL

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "ownership": self.ownership.value}


@dataclass(frozen=True)
class BoxedType:
    type: ClassVar[str] = "boxed"
    ownership: Ownership = Ownership.FULL
    inner_type: str = ""
    library: Optional[str] = None
    get_type_fn: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "type": self.type,
            "ownership": self.ownership.value,
            "innerType": self.inner_type,
            "library": self.library,
            "getTypeFn": self.get_type_fn,
        })


@dataclass(frozen=True)
class FundamentalType:
    """
    Ref-counted instance managed through explicit ref/unref (or copy/free) symbols.
    """
    type: ClassVar[str] = "fundamental"
    ownership: Ownership = Ownership.FULL
    library: Optional[str] = None
    ref_fn: str = ""
    unref_fn: str = ""
    inner_type: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "type": self.type,
            "ownership": self.ownership.value,
            "library": self.library,
            "refFn": self.ref_fn,
            "unrefFn": self.unref_fn,
            "innerType": self.inner_type,
        })


@dataclass(frozen=True)
class ArrayType:
    type: ClassVar[str] = "array"
    kind: ArrayKind = ArrayKind.ARRAY
    item_type: Optional["FfiType"] = None
    ownership: Ownership = Ownership.FULL
    fixed_size: Optional[int] = None
    size_param_index: Optional[int] = None
    # Bytes per element; only meaningful for GArray
    element_size: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "type": self.type,
            "kind": self.kind.value,
            "itemType": self.item_type.to_dict() if self.item_type is not None else None,
            "ownership": self.ownership.value,
            "fixedSize": self.fixed_size,
            "sizeParamIndex": self.size_param_index,
            "elementSize": self.element_size,
        })


@dataclass(frozen=True)
class HashTableType:
    type: ClassVar[str] = "hashtable"
    key_type: Optional["FfiType"] = None
    value_type: Optional["FfiType"] = None
    ownership: Ownership = Ownership.FULL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "keyType": self.key_type.to_dict() if self.key_type is not None else None,
            "valueType": self.value_type.to_dict() if self.value_type is not None else None,
            "ownership": self.ownership.value,
        }


# --------------------------
# Call-shaped variants
# --------------------------

@dataclass(frozen=True)
class CallbackType:
    """
    A callback parameter bound to a known trampoline ('kind'), or the generic closure.
    """
    type: ClassVar[str] = "callback"
    kind: str = "closure"
    arg_types: Tuple["FfiType", ...] = ()
    return_type: Optional["FfiType"] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "type": self.type,
            "kind": self.kind,
            "argTypes": [a.to_dict() for a in self.arg_types],
            "returnType": self.return_type.to_dict() if self.return_type is not None else None,
        })


@dataclass(frozen=True)
class RefType:
    """
    Out/in-out wrapper: the native side writes through a pointer to the inner value.
    """
    type: ClassVar[str] = "ref"
    inner_type: Optional["FfiType"] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "innerType": self.inner_type.to_dict() if self.inner_type is not None else None,
        }


FfiType = Union[
    IntType,
    FloatType,
    BooleanType,
    StringType,
    UndefinedType,
    GObjectType,
    BoxedType,
    StructType,
    FundamentalType,
    ArrayType,
    HashTableType,
    CallbackType,
    RefType,
]

FFI_VARIANTS: Tuple[type, ...] = (
    IntType,
    FloatType,
    BooleanType,
    StringType,
    UndefinedType,
    GObjectType,
    BoxedType,
    StructType,
    FundamentalType,
    ArrayType,
    HashTableType,
    CallbackType,
    RefType,
)

FFI_TAGS: FrozenSet[str] = frozenset(v.type for v in FFI_VARIANTS)

OWNED_VARIANTS: Tuple[type, ...] = (
    StringType,
    GObjectType,
    BoxedType,
    FundamentalType,
    ArrayType,
    HashTableType,
)

if len(FFI_TAGS) != len(FFI_VARIANTS):
    raise RuntimeError("Duplicate FFI descriptor tag")


# --------------------------
# Shared descriptors
# --------------------------

FFI_INT32 = IntType(size=32, unsigned=False)
FFI_UINT32 = IntType(size=32, unsigned=True)
# Pointer-sized opaque handle, also the fallback for anything unresolved
FFI_POINTER = IntType(size=64, unsigned=True)
FFI_VOID = UndefinedType()
FFI_BOOLEAN = BooleanType()


# --------------------------
# Helpers
# --------------------------

def ownership_of(ffi: FfiType) -> Optional[Ownership]:
    """
    Ownership carried by a descriptor, or None for value variants.
    """
    if isinstance(ffi, OWNED_VARIANTS):
        return ffi.ownership
    return None


def with_ownership(ffi: FfiType, ownership: Ownership) -> FfiType:
    """
    Return a copy with the given ownership; value variants are returned unchanged.
    """
    if isinstance(ffi, OWNED_VARIANTS):
        return replace(ffi, ownership=ownership)
    return ffi


def element_size_of(ffi: Optional[FfiType]) -> int:
    """
    Width in bytes of one element stored inline in a GArray.
    """
    if isinstance(ffi, (IntType, FloatType)):
        return ffi.size // 8
    if isinstance(ffi, BooleanType):
        # gboolean is an int
        return 4
    return 8


def is_ffi_type(value: Any) -> bool:
    return isinstance(value, FFI_VARIANTS)


__all__ = [
    "Ownership",
    "ArrayKind",
    "IntType",
    "FloatType",
    "BooleanType",
    "StringType",
    "UndefinedType",
    "GObjectType",
    "BoxedType",
    "StructType",
    "FundamentalType",
    "ArrayType",
    "HashTableType",
    "CallbackType",
    "RefType",
    "FfiType",
    "FFI_VARIANTS",
    "FFI_TAGS",
    "OWNED_VARIANTS",
    "FFI_INT32",
    "FFI_UINT32",
    "FFI_POINTER",
    "FFI_VOID",
    "FFI_BOOLEAN",
    "ownership_of",
    "with_ownership",
    "element_size_of",
    "is_ffi_type",
]
