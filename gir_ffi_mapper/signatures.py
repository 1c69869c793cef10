#!/usr/bin/env python3
"""
Callable-level mapping built on top of the TypeMapper.

A function, method or constructor is mapped parameter by parameter. Closure
targets (user-data and destroy-notify arguments owned by a callback) are removed
from the exposed signature, instance methods get a borrowed receiver that shifts
every sized-array index by one, and the result records why a callable cannot be
bound (unsupported callback, variadic arguments) instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
import logging

from .models import Direction, Function, Namespace, Transfer, TypeRef
from .registry import RegistryEntry
from .type_mapping import MappingResult, TypeMapper

logger = logging.getLogger(__name__)


class CallableKind(Enum):
    FUNCTION = "function"
    METHOD = "method"
    CONSTRUCTOR = "constructor"
    STATIC = "static"


@dataclass
class MappedParameter:
    name: str
    # Position in the declared (native) parameter list
    index: int
    mapping: MappingResult
    direction: Direction = Direction.IN
    nullable: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "index": self.index,
            "direction": self.direction.value,
            "nullable": self.nullable,
            "mapping": self.mapping.to_dict(),
        }


@dataclass
class MappedCallable:
    """
    Full mapping for a callable, ready for emission.
    """
    name: str
    c_identifier: str
    kind: CallableKind
    owner: Optional[str]
    exposed_params: List[MappedParameter]
    exposed_return: MappingResult
    receiver: Optional[MappingResult] = None
    throws: bool = False
    supported: bool = True
    reason: Optional[str] = None
    unknown_types: List[str] = field(default_factory=list)

    @property
    def exposed_param_list(self) -> List[Tuple[str, str]]:
        """
        Return a list of (type, name) for the exposed signature.
        """
        return [(p.mapping.ts, p.name) for p in self.exposed_params]

    @property
    def has_return(self) -> bool:
        return self.exposed_return.ts != "void"

    @property
    def qualified_name(self) -> str:
        return f"{self.owner}.{self.name}" if self.owner else self.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "cIdentifier": self.c_identifier,
            "kind": self.kind.value,
            "owner": self.owner,
            "receiver": self.receiver.to_dict() if self.receiver else None,
            "parameters": [p.to_dict() for p in self.exposed_params],
            "returnType": self.exposed_return.to_dict(),
            "throws": self.throws,
            "supported": self.supported,
            "reason": self.reason,
            "unknownTypes": list(self.unknown_types),
        }


@dataclass
class NamespaceMapping:
    namespace: str
    version: str = ""
    entries: List[RegistryEntry] = field(default_factory=list)
    callables: List[MappedCallable] = field(default_factory=list)
    skipped_classes: List[str] = field(default_factory=list)

    @property
    def supported(self) -> List[MappedCallable]:
        return [c for c in self.callables if c.supported]

    @property
    def unsupported(self) -> List[MappedCallable]:
        return [c for c in self.callables if not c.supported]

    @property
    def unknown_types(self) -> List[str]:
        seen: Dict[str, None] = {}
        for c in self.callables:
            for name in c.unknown_types:
                seen.setdefault(name, None)
        return sorted(seen)

    def summary(self) -> Dict[str, Any]:
        return {
            "namespace": self.namespace,
            "version": self.version,
            "entries": len(self.entries),
            "callables": len(self.callables),
            "supported": len(self.supported),
            "unsupported": len(self.unsupported),
            "unknownTypes": len(self.unknown_types),
            "skippedClasses": len(self.skipped_classes),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "namespace": self.namespace,
            "version": self.version,
            "types": [e.to_dict() for e in self.entries],
            "callables": [c.to_dict() for c in self.callables],
            "skippedClasses": list(self.skipped_classes),
            "unknownTypes": self.unknown_types,
        }


def _note_unknown(unknown: List[str], type_ref: TypeRef, mapping: MappingResult) -> None:
    if not mapping.is_unknown:
        return
    name = type_ref.element_type.name if type_ref.element_type is not None else type_ref.name
    if name not in unknown:
        unknown.append(name)


def map_callable(
    mapper: TypeMapper,
    function: Function,
    kind: CallableKind,
    owner: Optional[str] = None,
) -> MappedCallable:
    """
    Compute the exposed signature of a single callable.
    If unsupported, supported=False with 'reason'.
    """
    param_offset = 1 if kind == CallableKind.METHOD else 0
    receiver: Optional[MappingResult] = None
    if kind == CallableKind.METHOD and owner:
        # The instance is only lent to the callee
        receiver = mapper.map_type(TypeRef(name=owner, transfer_ownership=Transfer.NONE))

    exposed_params: List[MappedParameter] = []
    unknown: List[str] = []
    reason: Optional[str] = None
    params = function.parameters

    for i, p in enumerate(params):
        pname = p.name or f"arg{i}"
        if p.is_variadic:
            reason = reason or f"Variadic parameter '{pname}'"
            continue
        if mapper.is_closure_target(i, params):
            continue
        if mapper.has_unsupported_callback(p):
            reason = reason or f"Unsupported callback parameter '{pname}' of type '{p.type.name}'"
        mapping = mapper.map_parameter(p, param_offset)
        _note_unknown(unknown, p.type, mapping)
        exposed_params.append(MappedParameter(
            name=pname,
            index=i,
            mapping=mapping,
            direction=p.direction,
            nullable=mapper.is_nullable(p),
        ))

    exposed_return = mapper.map_type(function.return_type, is_return=True, param_offset=param_offset)
    _note_unknown(unknown, function.return_type, exposed_return)

    if reason:
        logger.debug("Unsupported callable %s: %s", function.c_identifier or function.name, reason)

    return MappedCallable(
        name=function.name,
        c_identifier=function.c_identifier,
        kind=kind,
        owner=owner,
        exposed_params=exposed_params,
        exposed_return=exposed_return,
        receiver=receiver,
        throws=function.throws,
        supported=reason is None,
        reason=reason,
        unknown_types=unknown,
    )


def map_namespace(mapper: TypeMapper, namespace: Namespace) -> NamespaceMapping:
    """
    Map every callable declared in a namespace. Skipped classes are left out entirely.
    """
    if mapper.namespace != namespace.name:
        logger.debug("Re-homing mapper from %r to %r", mapper.namespace, namespace.name)
        mapper.set_type_registry(mapper.registry, namespace.name)

    result = NamespaceMapping(namespace=namespace.name, version=namespace.version)
    if mapper.registry is not None:
        result.entries = list(mapper.registry.entries(namespace.name))

    for fn in namespace.functions:
        result.callables.append(map_callable(mapper, fn, CallableKind.FUNCTION))

    for cls in namespace.classes:
        if mapper.is_skipped_class(cls.name):
            logger.info("Skipping class %s.%s", namespace.name, cls.name)
            result.skipped_classes.append(cls.name)
            continue
        for fn in cls.constructors:
            result.callables.append(map_callable(mapper, fn, CallableKind.CONSTRUCTOR, cls.name))
        for fn in cls.methods:
            result.callables.append(map_callable(mapper, fn, CallableKind.METHOD, cls.name))
        for fn in cls.functions:
            result.callables.append(map_callable(mapper, fn, CallableKind.STATIC, cls.name))

    for iface in namespace.interfaces:
        for fn in iface.methods:
            result.callables.append(map_callable(mapper, fn, CallableKind.METHOD, iface.name))
        for fn in iface.functions:
            result.callables.append(map_callable(mapper, fn, CallableKind.STATIC, iface.name))

    for record in namespace.records:
        for fn in record.constructors:
            result.callables.append(map_callable(mapper, fn, CallableKind.CONSTRUCTOR, record.name))
        for fn in record.methods:
            result.callables.append(map_callable(mapper, fn, CallableKind.METHOD, record.name))
        for fn in record.functions:
            result.callables.append(map_callable(mapper, fn, CallableKind.STATIC, record.name))

    logger.info(
        "Mapped %s: %d callables (%d unsupported, %d unknown types)",
        namespace.name,
        len(result.callables),
        len(result.unsupported),
        len(result.unknown_types),
    )
    return result


__all__ = [
    "CallableKind",
    "MappedParameter",
    "MappedCallable",
    "NamespaceMapping",
    "map_callable",
    "map_namespace",
]
