#!/usr/bin/env python3
"""
Type mapping for GObject-Introspection style FFI bindings.

This module lowers type references from the normalized model (`models.py`) into
mapping results: the target-language spelling, the FFI descriptor the native
marshaler needs (`ffi_types.py`), the ownership discipline across the call
boundary, and the imports the emitter must generate. It provides:

- A catalog of primitive mappings (GLib and plain C spellings)
- Strings with transfer-aware ownership
- Four native array backings plus fixed, sized and zero-terminated arrays
- Hashtables mapped to Map<K, V>
- Registry-resolved enums, flags, classes, interfaces, records and callbacks
- Out/in-out Ref<> wrapping and trampoline-backed callback parameters
- A safe pointer-sized fallback for anything that cannot be resolved

Typical usage (high level):

    from .registry import TypeRegistry
    from .type_mapping import TypeMapper, MappingConfig

    mapper = TypeMapper.from_namespaces(namespaces, "Gtk", config=MappingConfig())

    for param in function.parameters:
        mapping = mapper.map_parameter(param)
        # mapping.ts, mapping.ffi.to_dict(), mapping.imports

Design notes:
- Mapping never raises for model content. Unresolvable names map to the
  'unknown' kind with a 64-bit unsigned descriptor, and the emitter decides
  what to do with them.
- Ownership defaults depend on position: parameters default to 'full',
  return values to 'borrowed'. An explicit transfer annotation always wins,
  and 'container' counts as 'full'.
- Containers pass their resolved transfer to their elements, through any
  number of nesting levels.
- The registry, home namespace and skip-set travel together as an immutable
  `MappingContext`. Mutating operations on the mapper swap the context.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple, Union
import logging

from .callbacks import (
    GENERIC_CLOSURE_KIND,
    GENERIC_CLOSURE_NAMES,
    GENERIC_CLOSURE_TS,
    USER_DATA_NAMES,
    TrampolineSignature,
    default_fixed_signatures,
    default_trampolines,
)
from .ffi_types import (
    FFI_BOOLEAN,
    FFI_INT32,
    FFI_POINTER,
    FFI_UINT32,
    FFI_VOID,
    ArrayKind,
    ArrayType,
    BoxedType,
    CallbackType,
    FfiType,
    FloatType,
    FundamentalType,
    GObjectType,
    HashTableType,
    IntType,
    Ownership,
    RefType,
    StringType,
    StructType,
    element_size_of,
    ownership_of,
    with_ownership,
)
from .models import ContainerType, Direction, Namespace, Parameter, Transfer, TypeRef
from .registry import EntryKind, RegistryEntry, TypeRegistry
from .utils import split_qualified_name, to_camel_case

logger = logging.getLogger(__name__)


# --------------------------
# Helpers
# --------------------------

def _int(size: int, unsigned: bool = False) -> IntType:
    return IntType(size=size, unsigned=unsigned)


# Native primitive spelling -> (target spelling, descriptor)
PRIMITIVE_TYPES: Dict[str, Tuple[str, FfiType]] = {
    "gboolean": ("boolean", FFI_BOOLEAN),
    "bool": ("boolean", FFI_BOOLEAN),
    "gchar": ("number", _int(8)),
    "guchar": ("number", _int(8, True)),
    "gint8": ("number", _int(8)),
    "guint8": ("number", _int(8, True)),
    "gshort": ("number", _int(16)),
    "gushort": ("number", _int(16, True)),
    "gint16": ("number", _int(16)),
    "guint16": ("number", _int(16, True)),
    "gunichar2": ("number", _int(16, True)),
    "gint": ("number", FFI_INT32),
    "guint": ("number", FFI_UINT32),
    "gint32": ("number", FFI_INT32),
    "guint32": ("number", FFI_UINT32),
    "gunichar": ("number", FFI_UINT32),
    "glong": ("number", _int(64)),
    "gulong": ("number", _int(64, True)),
    "gint64": ("number", _int(64)),
    "guint64": ("number", _int(64, True)),
    "gssize": ("number", _int(64)),
    "gsize": ("number", _int(64, True)),
    "goffset": ("number", _int(64)),
    "gintptr": ("number", _int(64)),
    "guintptr": ("number", _int(64, True)),
    "gfloat": ("number", FloatType(size=32)),
    "gdouble": ("number", FloatType(size=64)),
    "gpointer": ("number", FFI_POINTER),
    "gconstpointer": ("number", FFI_POINTER),
    "GType": ("number", FFI_POINTER),
    "char": ("number", _int(8)),
    "short": ("number", _int(16)),
    "int": ("number", FFI_INT32),
    "unsigned": ("number", FFI_UINT32),
    "long": ("number", _int(64)),
    "size_t": ("number", _int(64, True)),
    "float": ("number", FloatType(size=32)),
    "double": ("number", FloatType(size=64)),
    "none": ("void", FFI_VOID),
    "void": ("void", FFI_VOID),
}

STRING_TYPES: FrozenSet[str] = frozenset({"utf8", "filename"})
STRING_C_TYPES: FrozenSet[str] = frozenset({"gchar*", "char*"})

# Explicit container tags that select a native list/array backing
_CONTAINER_ARRAY_KINDS: Dict[ContainerType, ArrayKind] = {
    ContainerType.GLIST: ArrayKind.GLIST,
    ContainerType.GSLIST: ArrayKind.GSLIST,
    ContainerType.GPTRARRAY: ArrayKind.GPTRARRAY,
    ContainerType.GARRAY: ArrayKind.GARRAY,
}

# GLib container type names used in place of a container tag
_NAMED_ARRAY_KINDS: Dict[str, ArrayKind] = {
    "GLib.List": ArrayKind.GLIST,
    "GLib.SList": ArrayKind.GSLIST,
    "GLib.PtrArray": ArrayKind.GPTRARRAY,
    "GLib.Array": ArrayKind.GARRAY,
}


def _normalize_c_type(c_type: Optional[str]) -> str:
    """
    'const gchar *' -> 'gchar*'
    """
    if not c_type:
        return ""
    tokens = [tok for tok in c_type.replace("*", " * ").split() if tok not in ("const", "volatile")]
    return "".join(tokens)


def _ownership_for(transfer: Optional[Transfer], is_return: bool) -> Ownership:
    if transfer is Transfer.NONE:
        return Ownership.BORROWED
    if transfer in (Transfer.FULL, Transfer.CONTAINER):
        return Ownership.FULL
    return Ownership.BORROWED if is_return else Ownership.FULL


def _array_element_ts(ts: str) -> str:
    return f"({ts})[]" if "=>" in ts else f"{ts}[]"


# --------------------------
# Mapping model
# --------------------------

class MappingKind(Enum):
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    FLAGS = "flags"
    RECORD = "record"
    CALLBACK = "callback"
    PRIMITIVE = "primitive"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class TypeImport:
    """
    A registry type referenced by a mapping; the emitter turns these into imports.
    """
    kind: MappingKind
    name: str
    namespace: str
    is_external: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "name": self.name,
            "namespace": self.namespace,
            "isExternal": self.is_external,
        }


@dataclass(frozen=True)
class MappingResult:
    ts: str
    ffi: FfiType
    kind: MappingKind = MappingKind.PRIMITIVE
    imports: Tuple[TypeImport, ...] = ()
    # Set only for Ref<> wrappers
    inner_ts_type: Optional[str] = None

    @property
    def ownership(self) -> Optional[Ownership]:
        return ownership_of(self.ffi)

    @property
    def is_unknown(self) -> bool:
        return self.kind == MappingKind.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "ts": self.ts,
            "ffi": self.ffi.to_dict(),
            "kind": self.kind.value,
            "imports": [i.to_dict() for i in self.imports],
        }
        if self.inner_ts_type is not None:
            data["innerTsType"] = self.inner_ts_type
        return data


VOID_MAPPING = MappingResult(ts="void", ffi=FFI_VOID)
UNKNOWN_MAPPING = MappingResult(ts="number", ffi=FFI_POINTER, kind=MappingKind.UNKNOWN)
SKIPPED_MAPPING = MappingResult(ts="unknown", ffi=FFI_POINTER, kind=MappingKind.UNKNOWN)


@dataclass(frozen=True)
class CallbackParameterMapping:
    name: str
    mapping: MappingResult


@dataclass(frozen=True)
class MappingContext:
    """
    Everything a mapping call reads besides the type itself.
    """
    registry: Optional[TypeRegistry] = None
    namespace: str = ""
    skipped_classes: FrozenSet[str] = frozenset()

    def with_skipped(self, name: str) -> MappingContext:
        return replace(self, skipped_classes=self.skipped_classes | {name})

    def without_skipped(self) -> MappingContext:
        return replace(self, skipped_classes=frozenset())

    def is_skipped(self, entry: RegistryEntry) -> bool:
        skipped = self.skipped_classes
        return (
            entry.name in skipped
            or entry.transformed_name in skipped
            or entry.qualified_name in skipped
        )

    def resolve(self, name: str) -> Optional[RegistryEntry]:
        if self.registry is None:
            return None
        return self.registry.resolve_in_namespace(name, self.namespace or None)

    def qualify(self, name: str) -> str:
        """
        Best-effort 'Namespace.Name' for a possibly unqualified name.
        """
        namespace, _ = split_qualified_name(name)
        if namespace is not None:
            return name
        entry = self.resolve(name)
        if entry is not None:
            return entry.qualified_name
        return f"{self.namespace}.{name}" if self.namespace else name


# --------------------------
# Configuration
# --------------------------

@dataclass
class MappingConfig:
    """
    Settings and extensions for the type-mapper.
    """
    # Qualified callback name -> trampoline identifier
    trampolines: Dict[str, str] = field(default_factory=default_trampolines)
    # Trampoline identifier -> hand-written signature
    fixed_signatures: Dict[str, TrampolineSignature] = field(default_factory=default_fixed_signatures)
    # Callback parameters supplied by the trampoline itself
    user_data_names: FrozenSet[str] = USER_DATA_NAMES
    # Types bound to the generic variadic closure
    closure_type_names: FrozenSet[str] = GENERIC_CLOSURE_NAMES
    # Classes excluded from binding generation from the start
    skipped_classes: List[str] = field(default_factory=list)

    def with_trampoline(
        self,
        qualified_name: str,
        trampoline: str,
        signature: Optional[TrampolineSignature] = None,
    ) -> "MappingConfig":
        self.trampolines[qualified_name] = trampoline
        if signature is not None:
            self.fixed_signatures[trampoline] = signature
        return self


EnumUsageCallback = Callable[[str], None]
RecordUsageCallback = Callable[[str], None]
ExternalTypeUsageCallback = Callable[[TypeImport], None]
SameNamespaceClassUsageCallback = Callable[[str, str], None]


# --------------------------
# Mapper
# --------------------------

class TypeMapper:
    """
    Lowers type references and parameters into mapping results.

    Build with:
      - from_namespaces(namespaces, home_namespace, config): builds the registry too
      - or TypeMapper(registry, namespace, config)
    """

    def __init__(
        self,
        registry: Optional[TypeRegistry] = None,
        namespace: str = "",
        config: Optional[MappingConfig] = None,
    ) -> None:
        self.config = config or MappingConfig()
        self._context = MappingContext(
            registry=registry,
            namespace=namespace,
            skipped_classes=frozenset(self.config.skipped_classes),
        )
        self._enum_usage_callback: Optional[EnumUsageCallback] = None
        self._record_usage_callback: Optional[RecordUsageCallback] = None
        self._external_type_usage_callback: Optional[ExternalTypeUsageCallback] = None
        self._same_namespace_class_usage_callback: Optional[SameNamespaceClassUsageCallback] = None

    @classmethod
    def from_namespaces(
        cls,
        namespaces: Sequence[Namespace],
        home_namespace: str,
        config: Optional[MappingConfig] = None,
    ) -> "TypeMapper":
        return cls(TypeRegistry.from_namespaces(namespaces), home_namespace, config=config)

    # ---- Context ----

    @property
    def context(self) -> MappingContext:
        return self._context

    @property
    def registry(self) -> Optional[TypeRegistry]:
        return self._context.registry

    @property
    def namespace(self) -> str:
        return self._context.namespace

    @property
    def skipped_classes(self) -> FrozenSet[str]:
        return self._context.skipped_classes

    def set_type_registry(self, registry: Optional[TypeRegistry], namespace: str) -> None:
        self._context = replace(self._context, registry=registry, namespace=namespace)

    def register_skipped_class(self, name: str) -> None:
        self._context = self._context.with_skipped(name)

    def clear_skipped_classes(self) -> None:
        self._context = self._context.without_skipped()

    def is_skipped_class(self, name: str) -> bool:
        entry = self._context.resolve(name)
        if entry is not None:
            return self._context.is_skipped(entry)
        return name in self._context.skipped_classes

    # ---- Usage callbacks ----

    def set_enum_usage_callback(self, callback: Optional[EnumUsageCallback]) -> None:
        self._enum_usage_callback = callback

    def get_enum_usage_callback(self) -> Optional[EnumUsageCallback]:
        return self._enum_usage_callback

    def set_record_usage_callback(self, callback: Optional[RecordUsageCallback]) -> None:
        self._record_usage_callback = callback

    def get_record_usage_callback(self) -> Optional[RecordUsageCallback]:
        return self._record_usage_callback

    def set_external_type_usage_callback(self, callback: Optional[ExternalTypeUsageCallback]) -> None:
        self._external_type_usage_callback = callback

    def get_external_type_usage_callback(self) -> Optional[ExternalTypeUsageCallback]:
        return self._external_type_usage_callback

    def set_same_namespace_class_usage_callback(self, callback: Optional[SameNamespaceClassUsageCallback]) -> None:
        self._same_namespace_class_usage_callback = callback

    def get_same_namespace_class_usage_callback(self) -> Optional[SameNamespaceClassUsageCallback]:
        return self._same_namespace_class_usage_callback

    # ---- Public API ----

    def map_type(
        self,
        type_ref: TypeRef,
        is_return: bool = False,
        parent_transfer: Optional[Transfer] = None,
        param_offset: int = 0,
        context: Optional[MappingContext] = None,
    ) -> MappingResult:
        """
        Map one type occurrence.

        - is_return: selects the 'borrowed' ownership default instead of 'full'
        - parent_transfer: transfer of the enclosing container, inherited when the
          type has no annotation of its own
        - param_offset: synthetic leading arguments (e.g. the receiver) added to
          sized-array length indices
        """
        ctx = context or self._context
        if type_ref.container_type == ContainerType.GHASHTABLE:
            return self._map_hashtable(type_ref, ctx, is_return, parent_transfer, param_offset)
        if type_ref.is_array or type_ref.container_type in _CONTAINER_ARRAY_KINDS:
            return self._map_array(type_ref, ctx, is_return, parent_transfer, param_offset)

        primitive = PRIMITIVE_TYPES.get(type_ref.name)
        if primitive is not None:
            return MappingResult(ts=primitive[0], ffi=primitive[1])

        transfer = type_ref.transfer_ownership or parent_transfer
        if type_ref.name in STRING_TYPES:
            return self._string_mapping(transfer)

        entry = ctx.resolve(type_ref.name)
        if entry is not None:
            return self._map_registry_type(entry, ctx, transfer, is_return)
        return self._map_fallback(type_ref, transfer)

    def map_parameter(self, param: Parameter, param_offset: int = 0) -> MappingResult:
        """
        Map a parameter: callbacks bind to trampolines, out/in-out values get Ref<>.
        """
        type_ref = param.type
        if param.transfer_ownership is not None:
            type_ref = type_ref.with_transfer(param.transfer_ownership)

        callback = self._map_callback_parameter(type_ref)
        if callback is not None:
            return callback

        base = self.map_type(type_ref, False, None, param_offset)
        if not param.is_out:
            return base

        if param.caller_allocates and isinstance(base.ffi, (BoxedType, StructType, FundamentalType, GObjectType)):
            # Caller owns the storage; the callee fills it in place
            return replace(base, ffi=with_ownership(base.ffi, Ownership.BORROWED))

        if param.direction is Direction.INOUT and isinstance(base.ffi, GObjectType):
            # The object pointer itself is passed; only its state changes
            return base

        return MappingResult(
            ts=f"Ref<{base.ts}>",
            ffi=RefType(inner_type=base.ffi),
            kind=base.kind,
            imports=base.imports,
            inner_ts_type=base.ts,
        )

    def is_callback(self, name: str) -> bool:
        entry = self._context.resolve(name)
        return entry is not None and entry.kind == EntryKind.CALLBACK

    def is_closure_target(self, param: Union[int, Parameter], params: Sequence[Parameter]) -> bool:
        """
        True if a supported callback in `params` names this parameter as its
        user-data (closure) or destroy-notify argument.
        """
        if isinstance(param, int):
            index = param
        else:
            index = next((i for i, p in enumerate(params) if p is param), -1)
            if index < 0:
                return False
        for i, other in enumerate(params):
            if i == index:
                continue
            if other.closure != index and other.destroy != index:
                continue
            if self._trampoline_for(other.type.name) is not None:
                return True
        return False

    def is_nullable(self, param: Parameter) -> bool:
        return bool(param.nullable or param.optional)

    def has_unsupported_callback(self, param: Parameter) -> bool:
        name = param.type.name
        if self._is_generic_closure(name):
            return True
        return self.is_callback(name) and self._trampoline_for(name) is None

    def get_callback_param_mappings(self, param: Parameter) -> Optional[List[CallbackParameterMapping]]:
        """
        Mapped arguments of a supported callback, without the trailing user-data
        and destroy-notify parameters. None for unsupported callbacks.
        """
        if self._trampoline_for(param.type.name) is None:
            return None
        entry = self._context.resolve(param.type.name)
        if entry is None or entry.callback is None:
            return []
        return self._callback_arguments(entry.callback.parameters)

    def get_callback_return_type(self, param: Parameter) -> Optional[MappingResult]:
        trampoline = self._trampoline_for(param.type.name)
        if trampoline is None:
            return None
        entry = self._context.resolve(param.type.name)
        if entry is None or entry.callback is None:
            signature = self.config.fixed_signatures.get(trampoline)
            if signature is not None and signature.return_type != FFI_VOID:
                return MappingResult(ts="unknown", ffi=signature.return_type)
            return VOID_MAPPING
        return self.map_type(entry.callback.return_type, is_return=True)

    # ---- Strings ----

    @staticmethod
    def _string_mapping(transfer: Optional[Transfer]) -> MappingResult:
        ownership = Ownership.BORROWED if transfer is Transfer.NONE else Ownership.FULL
        return MappingResult(ts="string", ffi=StringType(ownership=ownership))

    # ---- Containers ----

    def _map_element(
        self,
        element: Optional[TypeRef],
        ctx: MappingContext,
        is_return: bool,
        transfer: Optional[Transfer],
        param_offset: int,
    ) -> MappingResult:
        if element is None:
            return MappingResult(ts="unknown", ffi=FFI_POINTER, kind=MappingKind.UNKNOWN)
        return self.map_type(element, is_return, transfer, param_offset, context=ctx)

    @staticmethod
    def _array_kind(type_ref: TypeRef) -> ArrayKind:
        explicit = _CONTAINER_ARRAY_KINDS.get(type_ref.container_type)
        if explicit is not None:
            return explicit
        named = _NAMED_ARRAY_KINDS.get(type_ref.name)
        if named is not None:
            return named
        c_type = _normalize_c_type(type_ref.c_type)
        if c_type.endswith("GSList*"):
            return ArrayKind.GSLIST
        if c_type.endswith("GList*"):
            return ArrayKind.GLIST
        if type_ref.fixed_size is not None:
            return ArrayKind.FIXED
        if type_ref.size_param_index is not None:
            return ArrayKind.SIZED
        return ArrayKind.ARRAY

    def _map_array(
        self,
        type_ref: TypeRef,
        ctx: MappingContext,
        is_return: bool,
        parent_transfer: Optional[Transfer],
        param_offset: int,
    ) -> MappingResult:
        transfer = type_ref.transfer_ownership or parent_transfer
        item = self._map_element(type_ref.element_type, ctx, is_return, transfer, param_offset)
        kind = self._array_kind(type_ref)

        ffi = ArrayType(
            kind=kind,
            item_type=item.ffi,
            ownership=_ownership_for(transfer, is_return),
            fixed_size=type_ref.fixed_size if kind == ArrayKind.FIXED else None,
            size_param_index=(
                type_ref.size_param_index + param_offset if kind == ArrayKind.SIZED else None
            ),
            element_size=element_size_of(item.ffi) if kind == ArrayKind.GARRAY else None,
        )
        return MappingResult(
            ts=_array_element_ts(item.ts),
            ffi=ffi,
            kind=item.kind,
            imports=item.imports,
        )

    def _map_hashtable(
        self,
        type_ref: TypeRef,
        ctx: MappingContext,
        is_return: bool,
        parent_transfer: Optional[Transfer],
        param_offset: int,
    ) -> MappingResult:
        transfer = type_ref.transfer_ownership or parent_transfer
        params = type_ref.type_parameters
        key = self._map_element(params[0] if len(params) > 0 else None, ctx, is_return, transfer, param_offset)
        value = self._map_element(params[1] if len(params) > 1 else None, ctx, is_return, transfer, param_offset)
        return MappingResult(
            ts=f"Map<{key.ts}, {value.ts}>",
            ffi=HashTableType(
                key_type=key.ffi,
                value_type=value.ffi,
                ownership=_ownership_for(transfer, is_return),
            ),
            kind=value.kind,
            imports=key.imports + tuple(i for i in value.imports if i not in key.imports),
        )

    # ---- Registry types ----

    def _map_registry_type(
        self,
        entry: RegistryEntry,
        ctx: MappingContext,
        transfer: Optional[Transfer],
        is_return: bool,
    ) -> MappingResult:
        if entry.kind == EntryKind.CALLBACK:
            # Only the function's address crosses the boundary here
            return MappingResult(ts="number", ffi=FFI_POINTER, kind=MappingKind.CALLBACK)

        if entry.kind in (EntryKind.CLASS, EntryKind.INTERFACE) and ctx.is_skipped(entry):
            logger.debug("Class %s is skipped; mapping as unknown", entry.qualified_name)
            return SKIPPED_MAPPING

        is_external = bool(entry.namespace != ctx.namespace)
        ts = f"{entry.namespace}.{entry.transformed_name}" if is_external else entry.transformed_name
        ownership = _ownership_for(transfer, is_return)

        ffi: FfiType
        if entry.kind == EntryKind.ENUM:
            kind = MappingKind.FLAGS if entry.is_bitfield else MappingKind.ENUM
            ffi = IntType(
                size=32,
                unsigned=entry.is_bitfield,
                library=entry.shared_library if entry.glib_get_type else None,
                get_type_fn=entry.glib_get_type,
            )
        elif entry.kind == EntryKind.RECORD:
            kind = MappingKind.RECORD
            ffi = self._record_ffi(entry, ownership)
        else:
            kind = MappingKind.CLASS if entry.kind == EntryKind.CLASS else MappingKind.INTERFACE
            if entry.fundamental and entry.ref_func and entry.unref_func:
                ffi = FundamentalType(
                    ownership=ownership,
                    library=entry.shared_library,
                    ref_fn=entry.ref_func,
                    unref_fn=entry.unref_func,
                    inner_type=entry.glib_type_name or entry.c_type or entry.transformed_name,
                )
            else:
                ffi = GObjectType(ownership=ownership)

        type_import = TypeImport(
            kind=kind,
            name=entry.transformed_name,
            namespace=entry.namespace,
            is_external=is_external,
        )
        self._notify_usage(entry, type_import)
        return MappingResult(ts=ts, ffi=ffi, kind=kind, imports=(type_import,))

    @staticmethod
    def _record_ffi(entry: RegistryEntry, ownership: Ownership) -> FfiType:
        inner_type = entry.glib_type_name or entry.c_type or entry.transformed_name
        if entry.copy_function and entry.free_function:
            return FundamentalType(
                ownership=ownership,
                library=entry.shared_library,
                ref_fn=entry.copy_function,
                unref_fn=entry.free_function,
                inner_type=inner_type,
            )
        if entry.glib_get_type:
            return BoxedType(
                ownership=ownership,
                inner_type=inner_type,
                library=entry.shared_library,
                get_type_fn=entry.glib_get_type,
            )
        return StructType(inner_type=inner_type)

    def _notify_usage(self, entry: RegistryEntry, type_import: TypeImport) -> None:
        if type_import.is_external:
            if self._external_type_usage_callback is not None:
                self._external_type_usage_callback(type_import)
            return
        if entry.kind == EntryKind.ENUM:
            if self._enum_usage_callback is not None:
                self._enum_usage_callback(entry.transformed_name)
        elif entry.kind == EntryKind.RECORD:
            if self._record_usage_callback is not None:
                self._record_usage_callback(entry.name)
        elif self._same_namespace_class_usage_callback is not None:
            self._same_namespace_class_usage_callback(entry.transformed_name, entry.name)

    # ---- Fallback ----

    def _map_fallback(self, type_ref: TypeRef, transfer: Optional[Transfer]) -> MappingResult:
        c_type = _normalize_c_type(type_ref.c_type)
        primitive = PRIMITIVE_TYPES.get(c_type)
        if primitive is not None:
            return MappingResult(ts=primitive[0], ffi=primitive[1])
        if c_type in STRING_C_TYPES:
            return self._string_mapping(transfer)
        logger.debug("Unknown type %s (c_type=%s); using pointer fallback", type_ref.name, type_ref.c_type)
        return UNKNOWN_MAPPING

    # ---- Callbacks ----

    def _trampoline_for(self, name: str) -> Optional[str]:
        return self.config.trampolines.get(self._context.qualify(name))

    def _is_generic_closure(self, name: str) -> bool:
        return name in self.config.closure_type_names or self._context.qualify(name) in self.config.closure_type_names

    def _map_callback_parameter(self, type_ref: TypeRef) -> Optional[MappingResult]:
        if self._is_generic_closure(type_ref.name):
            return MappingResult(
                ts=GENERIC_CLOSURE_TS,
                ffi=CallbackType(kind=GENERIC_CLOSURE_KIND),
                kind=MappingKind.CALLBACK,
            )

        trampoline = self._trampoline_for(type_ref.name)
        if trampoline is None:
            if self.is_callback(type_ref.name):
                logger.debug("Callback %s has no trampoline", type_ref.name)
            return None

        signature = self.config.fixed_signatures.get(trampoline)
        if signature is not None:
            return MappingResult(
                ts=signature.ts,
                ffi=CallbackType(kind=trampoline, arg_types=signature.arg_types, return_type=signature.return_type),
                kind=MappingKind.CALLBACK,
            )

        entry = self._context.resolve(type_ref.name)
        if entry is None or entry.callback is None:
            return MappingResult(
                ts=GENERIC_CLOSURE_TS,
                ffi=CallbackType(kind=trampoline),
                kind=MappingKind.CALLBACK,
            )

        args = self._callback_arguments(entry.callback.parameters)
        ret = self.map_type(entry.callback.return_type, is_return=True)
        arg_list = ", ".join(f"{to_camel_case(a.name)}: {a.mapping.ts}" for a in args)
        imports: List[TypeImport] = []
        for mapping in [a.mapping for a in args] + [ret]:
            imports.extend(i for i in mapping.imports if i not in imports)
        return MappingResult(
            ts=f"({arg_list}) => {ret.ts}",
            ffi=CallbackType(
                kind=trampoline,
                arg_types=tuple(a.mapping.ffi for a in args),
                return_type=ret.ffi,
            ),
            kind=MappingKind.CALLBACK,
            imports=tuple(imports),
        )

    def _callback_arguments(self, params: Sequence[Parameter]) -> List[CallbackParameterMapping]:
        """
        Values flowing from native code into the handler are mapped in return position.
        """
        destroy_names = {n for n, t in self.config.trampolines.items() if t == "destroyNotify"}
        referenced = {i for p in params for i in (p.closure, p.destroy) if i is not None}
        mapped: List[CallbackParameterMapping] = []
        for i, p in enumerate(params):
            if p.name in self.config.user_data_names or i in referenced:
                continue
            if self._context.qualify(p.type.name) in destroy_names:
                continue
            mapped.append(CallbackParameterMapping(name=p.name, mapping=self.map_type(p.type, is_return=True)))
        return mapped


__all__ = [
    "PRIMITIVE_TYPES",
    "STRING_TYPES",
    "MappingKind",
    "TypeImport",
    "MappingResult",
    "CallbackParameterMapping",
    "MappingContext",
    "MappingConfig",
    "TypeMapper",
    "VOID_MAPPING",
    "UNKNOWN_MAPPING",
    "SKIPPED_MAPPING",
]
