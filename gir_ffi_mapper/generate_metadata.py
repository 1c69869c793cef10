#!/usr/bin/env python3
"""
GIR FFI binding-metadata generator

This entrypoint wires together:
- Loading normalized-model JSON documents (one namespace per document)
- Building the cross-namespace type registry
- Mapping every callable of the target namespaces (TypeMapper)
- Emitting per-namespace metadata and Jinja2-rendered reports

Outputs:
- <output_dir>/<Namespace>.ffi.json
- <output_dir>/<Namespace>.report.md (unless --no-report)
- <optional> <output_dir>/manifest.json (for introspection)

Usage (example):
  python -m gir_ffi_mapper.generate_metadata \
    --model models/ \
    --target Gtk \
    --skip-class PrintUnixDialog \
    --output-dir generated/ffi

Exit codes:
  1 templating setup failed, 2 no input, 3 model loading failed,
  4 emission failed, 5 manifest failed
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence
import logging

logger = logging.getLogger(__name__)

# Local modules
from .models import GenerationContext, Namespace
from .utils import TemplateRenderer, configure_logging
from .manifest import emit_manifest
from .parsing.json_loader import ModelLoadError, discover_model_files, load_namespaces
from .emitters.metadata_emitter import MetadataEmitter, MetadataEmitterConfig
from .registry import TypeRegistry
from .signatures import NamespaceMapping, map_namespace
from .type_mapping import MappingConfig, TypeMapper


# --------------------------
# CLI
# --------------------------

def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Generate FFI binding metadata from normalized GObject-Introspection models")

    p.add_argument(
        "--model",
        action="append",
        default=[],
        help="Model JSON file or directory (repeatable). Directories are searched recursively for *.json.",
    )
    p.add_argument(
        "--target",
        action="append",
        default=[],
        help="Namespace to emit metadata for (repeatable). Defaults to every loaded namespace.",
    )
    p.add_argument(
        "--output-dir",
        default="generated",
        help="Output directory for metadata, reports and the manifest.",
    )
    p.add_argument(
        "--templates-dir",
        default=None,
        help="Optional templates directory. If omitted, package templates are used.",
    )
    p.add_argument(
        "--skip-class",
        action="append",
        default=[],
        help="Class excluded from binding generation (repeatable). Its uses map to 'unknown'.",
    )
    p.add_argument(
        "--no-report",
        action="store_true",
        help="Do not render the Markdown report for each namespace.",
    )
    p.add_argument(
        "--no-manifest",
        action="store_true",
        help="Do not emit the JSON manifest alongside generated metadata.",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Load and map everything, but only log the files that would be written.",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for DEBUG)."
    )
    p.add_argument(
        "-q",
        "--quiet",
        action="count",
        default=0,
        help="Decrease verbosity (-q for WARNING, -qq for ERROR)."
    )
    p.add_argument(
        "--log-level",
        choices=["CRITICAL","ERROR","WARNING","INFO","DEBUG","NOTSET","critical","error","warning","info","debug","notset"],
        default=None,
        help="Explicit log level (overrides -v/-q)."
    )
    p.add_argument(
        "--log-format",
        default="%(levelname)s: %(message)s",
        help="Logging format string."
    )
    p.add_argument(
        "--log-file",
        default=None,
        help="Optional file to write logs to."
    )

    return p.parse_args(argv)


def _resolve_level(ns: argparse.Namespace) -> int:
    if ns.log_level:
        return getattr(logging, str(ns.log_level).upper(), logging.INFO)
    if ns.verbose >= 1:
        return logging.DEBUG
    if ns.quiet >= 2:
        return logging.ERROR
    if ns.quiet == 1:
        return logging.WARNING
    return logging.INFO


def map_targets(
    namespaces: Sequence[Namespace],
    targets: Sequence[str],
    config: MappingConfig,
) -> List[NamespaceMapping]:
    """
    Map each target namespace against a registry built from every loaded namespace.
    """
    registry = TypeRegistry.from_namespaces(namespaces)
    by_name: Dict[str, Namespace] = {n.name: n for n in namespaces}
    mappings: List[NamespaceMapping] = []
    for target in targets:
        mapper = TypeMapper(registry, target, config=config)
        mappings.append(map_namespace(mapper, by_name[target]))
    return mappings


# --------------------------
# Main
# --------------------------

def main(argv: Optional[Sequence[str]] = None) -> int:
    ns = parse_args(argv)

    # Configure logging as early as possible
    configure_logging(
        level=_resolve_level(ns),
        to_file=ns.log_file,
        fmt=ns.log_format,
    )

    ctx = GenerationContext(
        output_dir=Path(ns.output_dir).resolve(),
        templates_dir=Path(ns.templates_dir).resolve() if ns.templates_dir else None,
        model_paths=[str(Path(p).resolve()) for p in ns.model],
        targets=list(ns.target),
        skipped_classes=list(ns.skip_class),
        emit_report=not ns.no_report,
        dry_run=ns.dry_run,
    )

    # Initialize renderer (layered: user dir -> package templates)
    renderer: Optional[TemplateRenderer] = None
    if ctx.emit_report:
        try:
            renderer = TemplateRenderer(ctx.templates_dir)
        except Exception:
            logger.exception("Failed to initialize templating")
            return 1

    # Discover model documents
    model_files = discover_model_files(ns.model)
    if not model_files:
        logger.error("No model documents found. Provide --model.")
        return 2

    try:
        namespaces = load_namespaces(model_files)
    except ModelLoadError:
        logger.exception("Failed to load models")
        return 3

    loaded = [n.name for n in namespaces]
    logger.info("Loaded %d namespace(s): %s", len(loaded), ", ".join(loaded))

    targets = ctx.targets or loaded
    missing = [t for t in targets if t not in loaded]
    if missing:
        logger.error("Target namespace(s) not found in models: %s", ", ".join(missing))
        return 2

    mappings = map_targets(namespaces, targets, MappingConfig(skipped_classes=list(ctx.skipped_classes)))

    # Emit metadata and reports
    try:
        emitter = MetadataEmitter(ctx=ctx, renderer=renderer, config=MetadataEmitterConfig())
        emitter.emit(mappings)
    except Exception:
        logger.exception("Failed to generate files")
        return 4

    # Optional: emit a JSON manifest of the run for debugging/inspection.
    if not ns.no_manifest:
        try:
            emit_manifest(ctx, mappings)
        except Exception:
            logger.exception("Failed to emit generation manifest")
            return 5

    if ctx.dry_run:
        logger.info("Dry-run complete (no files written).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
