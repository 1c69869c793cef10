#!/usr/bin/env python3
"""
Cross-namespace type registry.

The registry is the symbol table the mapper resolves type names against. It is
built once from the normalized model (usually one home namespace plus its
dependencies) and only read afterwards.

Lookups never raise: an unregistered name, including every disguised record,
simply resolves to None and the mapper falls back to an opaque pointer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence
import logging

from .models import Callback, Class, Enumeration, Interface, Namespace, Record
from .utils import normalize_class_name, split_qualified_name

logger = logging.getLogger(__name__)


class EntryKind(Enum):
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    RECORD = "record"
    CALLBACK = "callback"


@dataclass(frozen=True)
class RegistryEntry:
    namespace: str
    name: str
    transformed_name: str
    kind: EntryKind
    glib_type_name: Optional[str] = None
    glib_get_type: Optional[str] = None
    copy_function: Optional[str] = None
    free_function: Optional[str] = None
    ref_func: Optional[str] = None
    unref_func: Optional[str] = None
    fundamental: bool = False
    is_bitfield: bool = False
    shared_library: Optional[str] = None
    c_type: Optional[str] = None
    # Declared signature, kept for callbacks only
    callback: Optional[Callback] = field(default=None, compare=False)

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.name}"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "namespace": self.namespace,
            "name": self.name,
            "transformedName": self.transformed_name,
            "kind": self.kind.value,
        }
        optional = {
            "glibTypeName": self.glib_type_name,
            "glibGetType": self.glib_get_type,
            "copyFunction": self.copy_function,
            "freeFunction": self.free_function,
            "refFunc": self.ref_func,
            "unrefFunc": self.unref_func,
            "sharedLibrary": self.shared_library,
            "cType": self.c_type,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        if self.fundamental:
            data["fundamental"] = True
        if self.is_bitfield:
            data["isBitfield"] = True
        return data


class TypeRegistry:
    """
    Symbol table keyed by 'Namespace.Name'.

    Build with:
      - TypeRegistry.from_namespaces(namespaces)
      - or TypeRegistry() and the register_* methods
    """

    def __init__(self) -> None:
        self._entries: Dict[str, RegistryEntry] = {}
        # Preserves declaration order per namespace
        self._by_namespace: Dict[str, List[RegistryEntry]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, qualified_name: object) -> bool:
        return qualified_name in self._entries

    @property
    def namespaces(self) -> List[str]:
        return list(self._by_namespace)

    # ---- Registration ----

    def _add(self, entry: RegistryEntry) -> RegistryEntry:
        key = entry.qualified_name
        previous = self._entries.get(key)
        if previous is not None:
            logger.debug("Replacing registry entry %s (%s -> %s)", key, previous.kind.value, entry.kind.value)
            self._by_namespace[entry.namespace].remove(previous)
        self._entries[key] = entry
        self._by_namespace.setdefault(entry.namespace, []).append(entry)
        return entry

    def register_class(self, namespace: str, cls: Class, shared_library: Optional[str] = None) -> RegistryEntry:
        return self._add(RegistryEntry(
            namespace=namespace,
            name=cls.name,
            transformed_name=normalize_class_name(cls.name, namespace),
            kind=EntryKind.CLASS,
            glib_type_name=cls.glib_type_name,
            glib_get_type=cls.glib_get_type,
            ref_func=cls.ref_func,
            unref_func=cls.unref_func,
            fundamental=cls.fundamental,
            shared_library=shared_library,
            c_type=cls.c_type,
        ))

    def register_interface(self, namespace: str, iface: Interface, shared_library: Optional[str] = None) -> RegistryEntry:
        return self._add(RegistryEntry(
            namespace=namespace,
            name=iface.name,
            transformed_name=normalize_class_name(iface.name, namespace),
            kind=EntryKind.INTERFACE,
            glib_type_name=iface.glib_type_name,
            glib_get_type=iface.glib_get_type,
            shared_library=shared_library,
            c_type=iface.c_type,
        ))

    def register_enum(
        self,
        namespace: str,
        enum: Enumeration,
        shared_library: Optional[str] = None,
        is_bitfield: bool = False,
    ) -> RegistryEntry:
        return self._add(RegistryEntry(
            namespace=namespace,
            name=enum.name,
            transformed_name=normalize_class_name(enum.name, namespace),
            kind=EntryKind.ENUM,
            glib_type_name=enum.glib_type_name,
            glib_get_type=enum.glib_get_type,
            is_bitfield=is_bitfield,
            shared_library=shared_library,
            c_type=enum.c_type,
        ))

    def register_record(self, namespace: str, record: Record, shared_library: Optional[str] = None) -> Optional[RegistryEntry]:
        """
        Register a record. Disguised (opaque) records are never registered.
        """
        if record.disguised:
            logger.debug("Not registering disguised record %s.%s", namespace, record.name)
            return None
        return self._add(RegistryEntry(
            namespace=namespace,
            name=record.name,
            transformed_name=normalize_class_name(record.name, namespace),
            kind=EntryKind.RECORD,
            glib_type_name=record.glib_type_name,
            glib_get_type=record.glib_get_type,
            copy_function=record.copy_function,
            free_function=record.free_function,
            shared_library=shared_library,
            c_type=record.c_type,
        ))

    def register_callback(self, namespace: str, callback: Callback, shared_library: Optional[str] = None) -> RegistryEntry:
        return self._add(RegistryEntry(
            namespace=namespace,
            name=callback.name,
            transformed_name=normalize_class_name(callback.name, namespace),
            kind=EntryKind.CALLBACK,
            shared_library=shared_library,
            c_type=callback.c_type,
            callback=callback,
        ))

    def register_namespace(self, namespace: Namespace) -> None:
        ns = namespace.name
        lib = namespace.primary_library
        for cls in namespace.classes:
            self.register_class(ns, cls, lib)
        for iface in namespace.interfaces:
            self.register_interface(ns, iface, lib)
        for enum in namespace.enumerations:
            self.register_enum(ns, enum, lib)
        for bitfield in namespace.bitfields:
            self.register_enum(ns, bitfield, lib, is_bitfield=True)
        for record in namespace.records:
            self.register_record(ns, record, lib)
        for callback in namespace.callbacks:
            self.register_callback(ns, callback, lib)
        logger.debug("Registered namespace %s (%d entries)", ns, len(self._by_namespace.get(ns, [])))

    @classmethod
    def from_namespaces(cls, namespaces: Iterable[Namespace]) -> "TypeRegistry":
        registry = cls()
        for namespace in namespaces:
            registry.register_namespace(namespace)
        return registry

    # ---- Lookup ----

    def resolve(self, qualified_name: str) -> Optional[RegistryEntry]:
        """
        Resolve 'Namespace.Name'. Returns None when not registered.
        """
        if not qualified_name:
            return None
        return self._entries.get(qualified_name)

    def resolve_in_namespace(self, name: str, context_namespace: Optional[str]) -> Optional[RegistryEntry]:
        """
        Resolve a possibly unqualified name.

        Qualified names are looked up directly. Otherwise the context namespace is
        tried first, then every registered namespace by declared or transformed name.
        """
        if not name:
            return None
        namespace, local = split_qualified_name(name)
        if namespace is not None:
            return self.resolve(name)
        if context_namespace:
            entry = self._entries.get(f"{context_namespace}.{local}")
            if entry is not None:
                return entry
        for entries in self._by_namespace.values():
            for entry in entries:
                if entry.name == local or entry.transformed_name == local:
                    return entry
        return None

    def entries(self, namespace: Optional[str] = None) -> Sequence[RegistryEntry]:
        if namespace is None:
            return list(self._entries.values())
        return list(self._by_namespace.get(namespace, []))


__all__ = ["EntryKind", "RegistryEntry", "TypeRegistry"]
