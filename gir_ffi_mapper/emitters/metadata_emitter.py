#!/usr/bin/env python3
"""
Emitter module for FFI binding metadata.

This module takes mapped namespaces (`signatures.NamespaceMapping`) and writes:

- <output_dir>/<Namespace>.ffi.json   registry entries and every mapped callable
- <output_dir>/<Namespace>.report.md  human-readable summary (Jinja2 template)

Design goals:
- The JSON is the contract with the code emitter and the native marshaler;
  it holds descriptors exactly as `to_dict()` produces them.
- Production-grade file writing (atomic, idempotent).
- Configurable template name for the report.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..models import GenerationContext
from ..signatures import NamespaceMapping
from ..utils import TemplateRenderer, ensure_dir, write_text

logger = logging.getLogger(__name__)


# --------------------------
# Configuration
# --------------------------

@dataclass(frozen=True)
class MetadataEmitterConfig:
    """
    Configuration for the metadata emitter.

    The report template is looked up in the user templates directory first,
    then in the package templates (see utils.TemplateRenderer).
    """
    report_template: str = "report.md.j2"
    metadata_suffix: str = ".ffi.json"
    report_suffix: str = ".report.md"
    json_indent: int = 2


# --------------------------
# Emitter
# --------------------------

class MetadataEmitter:
    """
    Emit FFI metadata files from mapped namespaces.

    Usage:
        emitter = MetadataEmitter(ctx, renderer, config)
        written = emitter.emit(mappings)
    """

    def __init__(
        self,
        ctx: GenerationContext,
        renderer: Optional[TemplateRenderer] = None,
        config: Optional[MetadataEmitterConfig] = None,
    ) -> None:
        self.ctx = ctx
        self.renderer = renderer
        self.config = config or MetadataEmitterConfig()

    # ---- Public API ----

    def emit(self, mappings: Sequence[NamespaceMapping]) -> List[Path]:
        """
        Write metadata (and reports when enabled) for every namespace.
        Returns the paths that were (or, in dry-run, would have been) written.
        """
        if not self.ctx.dry_run:
            ensure_dir(self.ctx.output_dir)
        written: List[Path] = []
        for mapping in mappings:
            written.append(self._emit_metadata(mapping))
            if self.ctx.emit_report:
                written.append(self._emit_report(mapping))
        logger.info("Metadata generation complete under: %s", self.ctx.output_dir)
        return written

    def metadata_path(self, namespace: str) -> Path:
        return self.ctx.output_dir / f"{namespace}{self.config.metadata_suffix}"

    def report_path(self, namespace: str) -> Path:
        return self.ctx.output_dir / f"{namespace}{self.config.report_suffix}"

    # ---- Internals ----

    def _emit_metadata(self, mapping: NamespaceMapping) -> Path:
        path = self.metadata_path(mapping.namespace)
        content = json.dumps(mapping.to_dict(), indent=self.config.json_indent) + "\n"
        try:
            write_text(path, content, dry_run=self.ctx.dry_run)
        except OSError:
            logger.exception("Failed to write metadata for %s to %s", mapping.namespace, path)
            raise
        return path

    def _emit_report(self, mapping: NamespaceMapping) -> Path:
        if self.renderer is None:
            raise RuntimeError("A TemplateRenderer is required to emit reports")

        path = self.report_path(mapping.namespace)
        try:
            content = self.renderer.render(self.config.report_template, self._report_context(mapping))
        except Exception:
            logger.exception("Failed to render report for %s", mapping.namespace)
            raise
        try:
            write_text(path, content, dry_run=self.ctx.dry_run)
        except OSError:
            logger.exception("Failed to write report for %s to %s", mapping.namespace, path)
            raise
        return path

    @staticmethod
    def _report_context(mapping: NamespaceMapping) -> Dict[str, Any]:
        # Keep the template context plain and stable
        kinds: Dict[str, int] = {}
        for entry in mapping.entries:
            kinds[entry.kind.value] = kinds.get(entry.kind.value, 0) + 1
        return {
            "namespace": mapping.namespace,
            "version": mapping.version,
            "summary": mapping.summary(),
            "entry_kinds": dict(sorted(kinds.items())),
            "unsupported": [
                {"name": c.qualified_name, "c_identifier": c.c_identifier, "reason": c.reason}
                for c in mapping.unsupported
            ],
            "unknown_types": mapping.unknown_types,
            "skipped_classes": list(mapping.skipped_classes),
        }


__all__ = [
    "MetadataEmitterConfig",
    "MetadataEmitter",
]
