#!/usr/bin/env python3
"""
Utilities for logging, naming, templating (Jinja2) and file I/O for the GIR FFI mapper.

This module provides:
- Project-wide logging setup shared by the CLI and library users.
- Naming helpers used by the type registry to derive target-language spellings
  (PascalCase conversion and the reserved Object/Error renames).
- A layered Jinja2 environment (user templates, then package templates) used to
  render human-readable mapping reports.
- File writing helpers (atomic writes, newline normalization, idempotency).
"""

from __future__ import annotations

import os
import re
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Tuple, Union
import logging

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    StrictUndefined,
    TemplateNotFound,
)

logger = logging.getLogger(__name__)

PACKAGE_NAME = "gir_ffi_mapper"


def configure_logging(
    level: Optional[Union[int, str]] = None,
    *,
    to_file: Optional[Union[str, Path]] = None,
    fmt: Optional[str] = None,
    stream: Optional[TextIO] = None,
    propagate_package_loggers: bool = True,
) -> None:
    """
    Configure project-wide logging with consistent formatting and optional file output.

    Parameters:
    - level: int or name (e.g., 'INFO', 'DEBUG'). Defaults to INFO.
    - to_file: path to a log file; if provided, logs are also written there.
    - fmt: logging format string. Defaults to '%(levelname)s: %(message)s'.
    - stream: stream for console logs (defaults to sys.stderr).
    - propagate_package_loggers: whether the 'gir_ffi_mapper' logger propagates to root.
    """
    if level is None:
        resolved_level = logging.INFO
    elif isinstance(level, str):
        resolved_level = getattr(logging, level.upper(), logging.INFO)
    else:
        resolved_level = int(level)

    log_format = fmt or "%(levelname)s: %(message)s"
    stream = stream or sys.stderr

    # Reset root handlers for deterministic setup
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(resolved_level)

    handlers: List[logging.Handler] = []

    stream_handler = logging.StreamHandler(stream)
    stream_handler.setLevel(resolved_level)
    stream_handler.setFormatter(logging.Formatter(log_format))
    handlers.append(stream_handler)

    if to_file:
        file_handler = logging.FileHandler(str(to_file), mode="w")
        file_handler.setLevel(resolved_level)
        file_handler.setFormatter(logging.Formatter(log_format))
        handlers.append(file_handler)

    for h in handlers:
        root.addHandler(h)

    pkg_logger = logging.getLogger(PACKAGE_NAME)
    pkg_logger.setLevel(resolved_level)
    pkg_logger.propagate = propagate_package_loggers


# ----------------------------------------
# Naming helpers
# ----------------------------------------

# Declared names that never keep their spelling in generated code.
CLASS_RENAMES: Dict[str, str] = {"Error": "GError"}

ROOT_OBJECT_NAME = "Object"
ROOT_OBJECT_NAMESPACE = "GObject"


def to_camel_case(name: str) -> str:
    """
    'text_view' -> 'textView', 'drag-source' -> 'dragSource'.
    """
    return re.sub(r"[-_]([a-z])", lambda m: m.group(1).upper(), name)


def to_pascal_case(name: str) -> str:
    camel = to_camel_case(name)
    return camel[:1].upper() + camel[1:]


def normalize_class_name(name: str, namespace: Optional[str] = None) -> str:
    """
    Target-language spelling for a declared type name.

    Besides PascalCase conversion only two renames exist: the structured error
    record becomes 'GError', and the root object type becomes 'GObject' (or
    '<Namespace>Object' when another namespace declares its own 'Object').
    """
    pascal = to_pascal_case(name)
    if pascal in CLASS_RENAMES:
        return CLASS_RENAMES[pascal]
    if pascal == ROOT_OBJECT_NAME and namespace:
        return ROOT_OBJECT_NAMESPACE if namespace == ROOT_OBJECT_NAMESPACE else f"{namespace}{ROOT_OBJECT_NAME}"
    return pascal


def split_qualified_name(name: str) -> Tuple[Optional[str], str]:
    """
    'Gtk.Widget' -> ('Gtk', 'Widget'); 'Widget' -> (None, 'Widget').
    """
    if "." in name:
        namespace, _, local = name.partition(".")
        return namespace, local
    return None, name


# ----------------------------------------
# Jinja environment helpers
# ----------------------------------------

class TemplateRenderer:
    """
    A thin wrapper over a Jinja2 Environment with layered loaders and useful filters.
    - templates_dir: user-provided templates directory (highest precedence)
    - package templates: gir_ffi_mapper/templates
    """

    def __init__(self, templates_dir: Optional[Path] = None) -> None:
        loaders: List[Any] = []

        # 1) User-provided directory
        if templates_dir:
            p = Path(templates_dir)
            if p.is_dir():
                loaders.append(FileSystemLoader(str(p)))
            else:
                logger.warning("Templates directory %s does not exist; using package templates", p)

        # 2) Package templates (installed alongside this module)
        try:
            loaders.append(PackageLoader(PACKAGE_NAME, "templates"))
        except (ValueError, ModuleNotFoundError):
            pkg_templates_fs = Path(__file__).parent / "templates"
            if pkg_templates_fs.is_dir():
                loaders.append(FileSystemLoader(str(pkg_templates_fs)))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False,
            keep_trailing_newline=True,
        )

        self._register_filters()
        self._register_globals()

    def _register_filters(self) -> None:
        self.env.filters["pascal"] = to_pascal_case
        self.env.filters["camel"] = to_camel_case
        self.env.filters["md_code"] = _filter_md_code

    def _register_globals(self) -> None:
        self.env.globals["len"] = len
        self.env.globals["sorted"] = sorted

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound as e:
            raise RuntimeError(f"Template not found: {template_name}") from e
        return template.render(**context)


def _filter_md_code(value: Any) -> str:
    """
    Wrap a value in Markdown inline-code backticks, escaping embedded pipes for tables.
    """
    text = str(value).replace("|", "\\|")
    return f"`{text}`"


# ----------------------------------------
# File I/O helpers
# ----------------------------------------

def ensure_dir(p: Path) -> None:
    Path(p).mkdir(parents=True, exist_ok=True)


def normalize_newlines(text: str) -> str:
    """
    Normalize to Unix newlines for reproducible diffs.
    """
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _read_text_if_exists(path: Path, encoding: str = "utf-8") -> Optional[str]:
    try:
        with open(path, "r", encoding=encoding, newline="") as f:
            return f.read()
    except FileNotFoundError:
        return None


def atomic_write_text(
    path: Path,
    content: str,
    encoding: str = "utf-8",
    make_parents: bool = True,
    mode: Optional[int] = 0o644,
    log: bool = True,
    only_if_changed: bool = True,
) -> bool:
    """
    Write text atomically to the given path:
    - Optionally avoid writing if the content is unchanged.
    - Write to a temp file in the same directory and os.replace to final path.
    - Set POSIX file mode if provided.

    Returns True if a write occurred, False if skipped due to idempotency.
    """
    content = normalize_newlines(content)
    if make_parents:
        ensure_dir(path.parent)

    if only_if_changed:
        old = _read_text_if_exists(path, encoding=encoding)
        if old is not None and normalize_newlines(old) == content:
            if log:
                logger.debug("[skip] %s (unchanged)", path)
            return False

    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
        with os.fdopen(fd, "w", encoding=encoding, newline="\n") as f:
            f.write(content)
        if mode is not None:
            os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
        tmp_path = None
        if log:
            logger.info("[write] %s", path)
        return True
    finally:
        # Cleanup temp if an exception occurred before replace
        if tmp_path and os.path.exists(tmp_path):
            os.remove(tmp_path)


def write_text(
    path: Path,
    content: str,
    encoding: str = "utf-8",
    dry_run: bool = False,
    log: bool = True,
) -> None:
    """
    Convenience wrapper over atomic_write_text with optional dry-run support.
    """
    if dry_run:
        if log:
            logger.info("[dry-run] write %s", path)
        return
    atomic_write_text(path, content, encoding=encoding, log=log)


__all__ = [
    "CLASS_RENAMES",
    "TemplateRenderer",
    "configure_logging",
    "to_camel_case",
    "to_pascal_case",
    "normalize_class_name",
    "split_qualified_name",
    "ensure_dir",
    "normalize_newlines",
    "atomic_write_text",
    "write_text",
]
