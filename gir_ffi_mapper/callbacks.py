#!/usr/bin/env python3
"""
Native callback trampolines.

A callback parameter can only be bound when the native runtime ships a
trampoline for its exact signature. This module lists those trampolines
(keyed by qualified callback name) and pins the argument lists of the ones
whose shape cannot be derived from the introspection data alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Mapping, Optional, Tuple

from .ffi_types import (
    FFI_INT32,
    FFI_VOID,
    BoxedType,
    FfiType,
    GObjectType,
    Ownership,
)


# Qualified callback name -> trampoline identifier understood by the marshaler
CALLBACK_TRAMPOLINES: Mapping[str, str] = {
    "Adw.AnimationTargetFunc": "animationTargetFunc",
    "Gio.AsyncReadyCallback": "asyncReadyCallback",
    "GLib.DestroyNotify": "destroyNotify",
    "Gsk.PathIntersectionFunc": "pathIntersectionFunc",
    "Gtk.DrawingAreaDrawFunc": "drawingAreaDrawFunc",
    "Gtk.ScaleFormatValueFunc": "scaleFormatValueFunc",
    "Gtk.ShortcutFunc": "shortcutFunc",
    "Gtk.TickCallback": "tickCallback",
    "Gtk.TreeListModelCreateModelFunc": "treeListModelCreateModelFunc",
}

# Types bound to the generic variadic closure rather than a trampoline
GENERIC_CLOSURE_NAMES: FrozenSet[str] = frozenset({"GLib.Closure", "GObject.Closure"})
GENERIC_CLOSURE_TS = "(...args: unknown[]) => unknown"
GENERIC_CLOSURE_KIND = "closure"

# Trailing parameters the trampoline supplies itself
USER_DATA_NAMES: FrozenSet[str] = frozenset({"user_data", "data"})


@dataclass(frozen=True)
class TrampolineSignature:
    """
    Hand-written signature for a trampoline whose arguments are marshaled specially.
    """
    ts: str
    arg_types: Tuple[FfiType, ...] = ()
    return_type: FfiType = FFI_VOID


FIXED_TRAMPOLINE_SIGNATURES: Mapping[str, TrampolineSignature] = {
    "asyncReadyCallback": TrampolineSignature(
        ts="(source: unknown, result: unknown) => void",
        arg_types=(
            GObjectType(ownership=Ownership.BORROWED),
            GObjectType(ownership=Ownership.BORROWED),
        ),
    ),
    "destroyNotify": TrampolineSignature(ts="() => void"),
    "drawingAreaDrawFunc": TrampolineSignature(
        ts="(self: DrawingArea, cr: Cairo.Context, width: number, height: number) => void",
        arg_types=(
            GObjectType(ownership=Ownership.BORROWED),
            BoxedType(ownership=Ownership.BORROWED, inner_type="CairoContext"),
            FFI_INT32,
            FFI_INT32,
        ),
    ),
}


def get_trampoline_name(qualified_name: str, table: Optional[Mapping[str, str]] = None) -> Optional[str]:
    return (CALLBACK_TRAMPOLINES if table is None else table).get(qualified_name)


def is_supported_callback(qualified_name: str, table: Optional[Mapping[str, str]] = None) -> bool:
    return qualified_name in (CALLBACK_TRAMPOLINES if table is None else table)


def is_generic_closure(qualified_name: str) -> bool:
    return qualified_name in GENERIC_CLOSURE_NAMES


def default_trampolines() -> Dict[str, str]:
    return dict(CALLBACK_TRAMPOLINES)


def default_fixed_signatures() -> Dict[str, TrampolineSignature]:
    return dict(FIXED_TRAMPOLINE_SIGNATURES)


__all__ = [
    "CALLBACK_TRAMPOLINES",
    "GENERIC_CLOSURE_NAMES",
    "GENERIC_CLOSURE_TS",
    "GENERIC_CLOSURE_KIND",
    "USER_DATA_NAMES",
    "TrampolineSignature",
    "FIXED_TRAMPOLINE_SIGNATURES",
    "get_trampoline_name",
    "is_supported_callback",
    "is_generic_closure",
    "default_trampolines",
    "default_fixed_signatures",
]
