#!/usr/bin/env python3
"""
Data models for the GIR FFI mapper.

This module provides serializable data structures describing the normalized
introspection model that the mapper consumes:
- Type references with their ownership/array/container annotations
- Parameters (direction, caller-allocates, closure/destroy links)
- Callables (functions, methods, constructors) and callback declarations
- Classes, interfaces, records, enumerations/bitfields grouped per namespace
- Generation context (paths, flags) for a single CLI run

The models are produced by an external parser (or loaded from JSON via
`parsing.json_loader`) and are treated as read-only by the registry and mapper.

`from_dict` accepts both the snake_case keys produced by `to_dict` and the
camelCase keys used by GIR-style normalized dumps (`transferOwnership`,
`isArray`, ...). Missing optional keys fall back to defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .utils import split_qualified_name, to_camel_case


# --------------------------
# Annotation enums
# --------------------------

class Transfer(Enum):
    NONE = "none"
    FULL = "full"
    CONTAINER = "container"


class ContainerType(Enum):
    NONE = "none"
    GLIST = "glist"
    GSLIST = "gslist"
    GPTRARRAY = "gptrarray"
    GARRAY = "garray"
    GHASHTABLE = "ghashtable"


class Direction(Enum):
    IN = "in"
    OUT = "out"
    INOUT = "inout"


def _get(data: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """
    Look up a snake_case key, falling back to its camelCase spelling.
    """
    if key in data:
        return data[key]
    camel = to_camel_case(key)
    if camel in data:
        return data[camel]
    return default


def _enum_value(enum_cls, raw: Any, default: Any = None) -> Any:
    if raw is None:
        return default
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(str(raw).lower())
    except ValueError:
        return default


def _optional_int(raw: Any) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _collection(data: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    """
    Entries of a list-valued key, or of an object keyed by declared name
    (the key fills in a missing "name").
    """
    raw = _get(data, key) or []
    if isinstance(raw, Mapping):
        return [
            v if v.get("name") else {**v, "name": k}
            for k, v in raw.items()
            if isinstance(v, Mapping)
        ]
    if not isinstance(raw, (list, tuple)):
        return []
    return [d for d in raw if isinstance(d, Mapping)]


# --------------------------
# Type references
# --------------------------

@dataclass(frozen=True)
class TypeRef:
    """
    One occurrence of a type in an API surface (parameter, return value, field, element).

    `name` may be namespace-qualified ('Gdk.Display'). Arrays carry their element in
    `element_type`; hashtables carry key/value in `type_parameters`.
    """
    name: str
    is_array: bool = False
    element_type: Optional[TypeRef] = None
    container_type: ContainerType = ContainerType.NONE
    type_parameters: Tuple[TypeRef, ...] = ()
    transfer_ownership: Optional[Transfer] = None
    c_type: Optional[str] = None
    fixed_size: Optional[int] = None
    size_param_index: Optional[int] = None
    zero_terminated: bool = False
    nullable: bool = False
    optional: bool = False

    @property
    def namespace(self) -> Optional[str]:
        return split_qualified_name(self.name)[0]

    @property
    def local_name(self) -> str:
        return split_qualified_name(self.name)[1]

    def with_transfer(self, transfer: Optional[Transfer]) -> TypeRef:
        return replace(self, transfer_ownership=transfer)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "is_array": self.is_array,
            "element_type": self.element_type.to_dict() if self.element_type else None,
            "container_type": self.container_type.value,
            "type_parameters": [t.to_dict() for t in self.type_parameters],
            "transfer_ownership": self.transfer_ownership.value if self.transfer_ownership else None,
            "c_type": self.c_type,
            "fixed_size": self.fixed_size,
            "size_param_index": self.size_param_index,
            "zero_terminated": self.zero_terminated,
            "nullable": self.nullable,
            "optional": self.optional,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> TypeRef:
        element = _get(data, "element_type")
        return TypeRef(
            name=str(_get(data, "name", "none") or "none"),
            is_array=bool(_get(data, "is_array", False)),
            element_type=TypeRef.from_dict(element) if isinstance(element, Mapping) else None,
            container_type=_enum_value(ContainerType, _get(data, "container_type"), ContainerType.NONE),
            type_parameters=tuple(
                TypeRef.from_dict(t) for t in (_get(data, "type_parameters") or []) if isinstance(t, Mapping)
            ),
            transfer_ownership=_enum_value(Transfer, _get(data, "transfer_ownership")),
            c_type=_get(data, "c_type"),
            fixed_size=_optional_int(_get(data, "fixed_size")),
            size_param_index=_optional_int(_get(data, "size_param_index")),
            zero_terminated=bool(_get(data, "zero_terminated", False)),
            nullable=bool(_get(data, "nullable", False)),
            optional=bool(_get(data, "optional", False)),
        )


VOID_TYPE = TypeRef(name="none")


# --------------------------
# Parameters and callables
# --------------------------

@dataclass
class Parameter:
    name: str
    type: TypeRef
    direction: Direction = Direction.IN
    caller_allocates: bool = False
    transfer_ownership: Optional[Transfer] = None
    nullable: bool = False
    optional: bool = False
    # Indices of the user-data and destroy-notify parameters paired with a callback
    closure: Optional[int] = None
    destroy: Optional[int] = None
    scope: Optional[str] = None

    @property
    def is_out(self) -> bool:
        return self.direction in (Direction.OUT, Direction.INOUT)

    @property
    def is_variadic(self) -> bool:
        return self.name == "..." or self.type.name in ("va_list", "...")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.to_dict(),
            "direction": self.direction.value,
            "caller_allocates": self.caller_allocates,
            "transfer_ownership": self.transfer_ownership.value if self.transfer_ownership else None,
            "nullable": self.nullable,
            "optional": self.optional,
            "closure": self.closure,
            "destroy": self.destroy,
            "scope": self.scope,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> Parameter:
        raw_type = _get(data, "type")
        return Parameter(
            name=str(_get(data, "name", "") or ""),
            type=TypeRef.from_dict(raw_type) if isinstance(raw_type, Mapping) else VOID_TYPE,
            direction=_enum_value(Direction, _get(data, "direction"), Direction.IN),
            caller_allocates=bool(_get(data, "caller_allocates", False)),
            transfer_ownership=_enum_value(Transfer, _get(data, "transfer_ownership")),
            nullable=bool(_get(data, "nullable", False)),
            optional=bool(_get(data, "optional", False)),
            closure=_optional_int(_get(data, "closure")),
            destroy=_optional_int(_get(data, "destroy")),
            scope=_get(data, "scope"),
        )


def _parameters_from(data: Mapping[str, Any]) -> List[Parameter]:
    return [Parameter.from_dict(p) for p in _collection(data, "parameters")]


def _return_type_from(data: Mapping[str, Any]) -> TypeRef:
    raw = _get(data, "return_type")
    return TypeRef.from_dict(raw) if isinstance(raw, Mapping) else VOID_TYPE


@dataclass
class Function:
    """
    A function, method or constructor. Whether it takes an implicit receiver is
    decided by where it is declared (Class.methods vs Class.functions).
    """
    name: str
    c_identifier: str = ""
    return_type: TypeRef = VOID_TYPE
    parameters: List[Parameter] = field(default_factory=list)
    throws: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "c_identifier": self.c_identifier,
            "return_type": self.return_type.to_dict(),
            "parameters": [p.to_dict() for p in self.parameters],
            "throws": self.throws,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> Function:
        return Function(
            name=str(_get(data, "name", "")),
            c_identifier=str(_get(data, "c_identifier", "") or ""),
            return_type=_return_type_from(data),
            parameters=_parameters_from(data),
            throws=bool(_get(data, "throws", False)),
        )


@dataclass
class Callback:
    name: str
    c_type: Optional[str] = None
    return_type: TypeRef = VOID_TYPE
    parameters: List[Parameter] = field(default_factory=list)
    throws: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "c_type": self.c_type,
            "return_type": self.return_type.to_dict(),
            "parameters": [p.to_dict() for p in self.parameters],
            "throws": self.throws,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> Callback:
        return Callback(
            name=str(_get(data, "name", "")),
            c_type=_get(data, "c_type"),
            return_type=_return_type_from(data),
            parameters=_parameters_from(data),
            throws=bool(_get(data, "throws", False)),
        )


def _functions_from(data: Mapping[str, Any], key: str) -> List[Function]:
    return [Function.from_dict(f) for f in _collection(data, key)]


# --------------------------
# Declarations
# --------------------------

@dataclass
class Class:
    name: str
    c_type: Optional[str] = None
    parent: Optional[str] = None
    glib_type_name: Optional[str] = None
    glib_get_type: Optional[str] = None
    abstract: bool = False
    # Fundamental (non-GObject) instantiatable types such as GParamSpec
    fundamental: bool = False
    ref_func: Optional[str] = None
    unref_func: Optional[str] = None
    implements: List[str] = field(default_factory=list)
    constructors: List[Function] = field(default_factory=list)
    methods: List[Function] = field(default_factory=list)
    functions: List[Function] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "c_type": self.c_type,
            "parent": self.parent,
            "glib_type_name": self.glib_type_name,
            "glib_get_type": self.glib_get_type,
            "abstract": self.abstract,
            "fundamental": self.fundamental,
            "ref_func": self.ref_func,
            "unref_func": self.unref_func,
            "implements": list(self.implements),
            "constructors": [f.to_dict() for f in self.constructors],
            "methods": [f.to_dict() for f in self.methods],
            "functions": [f.to_dict() for f in self.functions],
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> Class:
        return Class(
            name=str(_get(data, "name", "")),
            c_type=_get(data, "c_type"),
            parent=_get(data, "parent"),
            glib_type_name=_get(data, "glib_type_name"),
            glib_get_type=_get(data, "glib_get_type"),
            abstract=bool(_get(data, "abstract", False)),
            fundamental=bool(_get(data, "fundamental", False)),
            ref_func=_get(data, "ref_func"),
            unref_func=_get(data, "unref_func"),
            implements=[str(i) for i in (_get(data, "implements") or [])],
            constructors=_functions_from(data, "constructors"),
            methods=_functions_from(data, "methods"),
            functions=_functions_from(data, "functions"),
        )


@dataclass
class Interface:
    name: str
    c_type: Optional[str] = None
    glib_type_name: Optional[str] = None
    glib_get_type: Optional[str] = None
    prerequisites: List[str] = field(default_factory=list)
    methods: List[Function] = field(default_factory=list)
    functions: List[Function] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "c_type": self.c_type,
            "glib_type_name": self.glib_type_name,
            "glib_get_type": self.glib_get_type,
            "prerequisites": list(self.prerequisites),
            "methods": [f.to_dict() for f in self.methods],
            "functions": [f.to_dict() for f in self.functions],
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> Interface:
        return Interface(
            name=str(_get(data, "name", "")),
            c_type=_get(data, "c_type"),
            glib_type_name=_get(data, "glib_type_name"),
            glib_get_type=_get(data, "glib_get_type"),
            prerequisites=[str(p) for p in (_get(data, "prerequisites") or [])],
            methods=_functions_from(data, "methods"),
            functions=_functions_from(data, "functions"),
        )


@dataclass
class Record:
    """
    A C struct. Sub-kind (fundamental / boxed / plain struct) is decided by the
    mapper from the copy/free functions and the runtime get-type symbol.
    """
    name: str
    c_type: Optional[str] = None
    glib_type_name: Optional[str] = None
    glib_get_type: Optional[str] = None
    copy_function: Optional[str] = None
    free_function: Optional[str] = None
    # Opaque structs without public fields; never registered
    disguised: bool = False
    constructors: List[Function] = field(default_factory=list)
    methods: List[Function] = field(default_factory=list)
    functions: List[Function] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "c_type": self.c_type,
            "glib_type_name": self.glib_type_name,
            "glib_get_type": self.glib_get_type,
            "copy_function": self.copy_function,
            "free_function": self.free_function,
            "disguised": self.disguised,
            "constructors": [f.to_dict() for f in self.constructors],
            "methods": [f.to_dict() for f in self.methods],
            "functions": [f.to_dict() for f in self.functions],
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> Record:
        return Record(
            name=str(_get(data, "name", "")),
            c_type=_get(data, "c_type"),
            glib_type_name=_get(data, "glib_type_name"),
            glib_get_type=_get(data, "glib_get_type"),
            copy_function=_get(data, "copy_function"),
            free_function=_get(data, "free_function"),
            disguised=bool(_get(data, "disguised", False)),
            constructors=_functions_from(data, "constructors"),
            methods=_functions_from(data, "methods"),
            functions=_functions_from(data, "functions"),
        )


@dataclass
class EnumMember:
    name: str
    value: int = 0
    c_identifier: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "value": self.value, "c_identifier": self.c_identifier}

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> EnumMember:
        return EnumMember(
            name=str(_get(data, "name", "")),
            value=_optional_int(_get(data, "value")) or 0,
            c_identifier=str(_get(data, "c_identifier", "") or ""),
        )


@dataclass
class Enumeration:
    """
    An enumeration or a bitfield; which one is decided by the namespace collection
    it is declared in.
    """
    name: str
    c_type: Optional[str] = None
    glib_type_name: Optional[str] = None
    glib_get_type: Optional[str] = None
    members: List[EnumMember] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "c_type": self.c_type,
            "glib_type_name": self.glib_type_name,
            "glib_get_type": self.glib_get_type,
            "members": [m.to_dict() for m in self.members],
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> Enumeration:
        return Enumeration(
            name=str(_get(data, "name", "")),
            c_type=_get(data, "c_type"),
            glib_type_name=_get(data, "glib_type_name"),
            glib_get_type=_get(data, "glib_get_type"),
            members=[EnumMember.from_dict(m) for m in _collection(data, "members")],
        )


@dataclass
class Namespace:
    name: str
    version: str = ""
    shared_library: str = ""
    c_prefix: str = ""
    classes: List[Class] = field(default_factory=list)
    interfaces: List[Interface] = field(default_factory=list)
    records: List[Record] = field(default_factory=list)
    enumerations: List[Enumeration] = field(default_factory=list)
    bitfields: List[Enumeration] = field(default_factory=list)
    callbacks: List[Callback] = field(default_factory=list)
    functions: List[Function] = field(default_factory=list)

    @property
    def primary_library(self) -> Optional[str]:
        """
        First entry of a comma-separated shared-library list ('libgtk-4.so.1,libfoo.so').
        """
        if not self.shared_library:
            return None
        return self.shared_library.split(",")[0].strip() or None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "shared_library": self.shared_library,
            "c_prefix": self.c_prefix,
            "classes": [c.to_dict() for c in self.classes],
            "interfaces": [i.to_dict() for i in self.interfaces],
            "records": [r.to_dict() for r in self.records],
            "enumerations": [e.to_dict() for e in self.enumerations],
            "bitfields": [b.to_dict() for b in self.bitfields],
            "callbacks": [c.to_dict() for c in self.callbacks],
            "functions": [f.to_dict() for f in self.functions],
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> Namespace:
        return Namespace(
            name=str(_get(data, "name", "")),
            version=str(_get(data, "version", "") or ""),
            shared_library=str(_get(data, "shared_library", "") or ""),
            c_prefix=str(_get(data, "c_prefix", "") or ""),
            classes=[Class.from_dict(d) for d in _collection(data, "classes")],
            interfaces=[Interface.from_dict(d) for d in _collection(data, "interfaces")],
            records=[Record.from_dict(d) for d in _collection(data, "records")],
            enumerations=[Enumeration.from_dict(d) for d in _collection(data, "enumerations")],
            bitfields=[Enumeration.from_dict(d) for d in _collection(data, "bitfields")],
            callbacks=[Callback.from_dict(d) for d in _collection(data, "callbacks")],
            functions=_functions_from(data, "functions"),
        )


# --------------------------
# Generation context
# --------------------------

@dataclass
class GenerationContext:
    """
    Parameters for a single generation run.

    Paths are absolute. Emitters should rely on these rather than guessing.
    """
    output_dir: Path
    templates_dir: Optional[Path]
    model_paths: List[str] = field(default_factory=list)
    targets: List[str] = field(default_factory=list)
    skipped_classes: List[str] = field(default_factory=list)
    emit_report: bool = True
    dry_run: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "output_dir": str(self.output_dir),
            "templates_dir": str(self.templates_dir) if self.templates_dir else None,
            "model_paths": list(self.model_paths),
            "targets": list(self.targets),
            "skipped_classes": list(self.skipped_classes),
            "emit_report": self.emit_report,
            "dry_run": self.dry_run,
        }


__all__ = [
    "Transfer",
    "ContainerType",
    "Direction",
    "TypeRef",
    "VOID_TYPE",
    "Parameter",
    "Function",
    "Callback",
    "Class",
    "Interface",
    "Record",
    "EnumMember",
    "Enumeration",
    "Namespace",
    "GenerationContext",
]
