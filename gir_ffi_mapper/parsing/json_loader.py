#!/usr/bin/env python3
"""
Loading of normalized-model JSON documents.

The GIR XML itself is parsed elsewhere; this module reads the normalized dump
that parser produces (one namespace per document) into `models.Namespace`
objects the registry and mapper consume.

Document shape (keys may be snake_case or camelCase):

    {
      "name": "Gtk",
      "version": "4.0",
      "sharedLibrary": "libgtk-4.so.1",
      "classes": [...], "interfaces": [...], "records": [...],
      "enumerations": [...], "bitfields": [...], "callbacks": [...],
      "functions": [...]
    }

A document may also wrap the namespace as {"namespace": {...}} or hold a list of
namespaces under "namespaces".
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Sequence, Union
import logging

from ..models import Namespace

logger = logging.getLogger(__name__)


class ModelLoadError(RuntimeError):
    """
    A model document could not be read or does not describe a namespace.
    """

    def __init__(self, path: Union[str, Path], message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = Path(path)


# --------------------------
# Discovery
# --------------------------

def discover_model_files(paths: Iterable[Union[str, Path]]) -> List[Path]:
    """
    Expand files and directories into a unique list of JSON model files.
    Directory contents are sorted; the given order of arguments is kept.
    """
    results: List[Path] = []
    for p in paths:
        pp = Path(p)
        if pp.is_file() and pp.suffix.lower() == ".json":
            results.append(pp.resolve())
        elif pp.is_dir():
            results.extend(sorted(pp.rglob("*.json")))
        else:
            logger.warning("Skipping non-existent or non-JSON path: %s", p)

    # De-duplicate preserving order
    seen: set = set()
    unique: List[Path] = []
    for f in results:
        s = str(f.resolve())
        if s in seen:
            continue
        seen.add(s)
        unique.append(Path(s))
    return unique


# --------------------------
# Loading
# --------------------------

def _namespace_documents(path: Path, data: Any) -> Sequence[Mapping[str, Any]]:
    if isinstance(data, Mapping):
        if isinstance(data.get("namespaces"), list):
            docs = data["namespaces"]
        elif isinstance(data.get("namespace"), Mapping):
            docs = [data["namespace"]]
        else:
            docs = [data]
    elif isinstance(data, list):
        docs = data
    else:
        raise ModelLoadError(path, f"expected a JSON object or list, got {type(data).__name__}")

    for doc in docs:
        if not isinstance(doc, Mapping) or not doc.get("name"):
            raise ModelLoadError(path, "namespace document without a 'name'")
    return docs


def load_namespaces_from_file(path: Union[str, Path]) -> List[Namespace]:
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ModelLoadError(path, f"cannot read file ({e})") from e
    except json.JSONDecodeError as e:
        raise ModelLoadError(path, f"invalid JSON at line {e.lineno} column {e.colno}: {e.msg}") from e

    namespaces = [Namespace.from_dict(doc) for doc in _namespace_documents(path, data)]
    for ns in namespaces:
        logger.debug(
            "Loaded %s %s from %s (%d classes, %d records, %d callbacks)",
            ns.name,
            ns.version,
            path,
            len(ns.classes),
            len(ns.records),
            len(ns.callbacks),
        )
    return namespaces


def load_namespace(path: Union[str, Path]) -> Namespace:
    """
    Load a document holding exactly one namespace.
    """
    namespaces = load_namespaces_from_file(path)
    if len(namespaces) != 1:
        raise ModelLoadError(path, f"expected one namespace, found {len(namespaces)}")
    return namespaces[0]


def load_namespaces(paths: Iterable[Union[str, Path]]) -> List[Namespace]:
    """
    Load every namespace from the given documents. A namespace declared twice
    keeps its first definition.
    """
    loaded: List[Namespace] = []
    names: set = set()
    for path in paths:
        for ns in load_namespaces_from_file(path):
            if ns.name in names:
                logger.warning("Namespace %s declared again in %s; keeping the first definition", ns.name, path)
                continue
            names.add(ns.name)
            loaded.append(ns)
    return loaded


__all__ = [
    "ModelLoadError",
    "discover_model_files",
    "load_namespaces_from_file",
    "load_namespace",
    "load_namespaces",
]
