import sys
import os
import platform
import shlex
from datetime import datetime, timezone
from importlib import metadata as importlib_metadata

import json
from typing import Optional, Sequence
from .models import GenerationContext
from .signatures import NamespaceMapping
from .utils import write_text

import logging
logger = logging.getLogger(__name__)

DIST_NAME = "gir-ffi-mapper"


def generator_version() -> Optional[str]:
    try:
        return importlib_metadata.version(DIST_NAME)
    except importlib_metadata.PackageNotFoundError:
        return None


def emit_manifest(ctx: GenerationContext, mappings: Sequence[NamespaceMapping]) -> dict:
    """
    Emit a JSON manifest of the run: generator metadata, full command-line
    invocation, environment and a per-namespace summary. Useful for debugging
    and for checking generated metadata into version control.

    Returns the manifest data.
    """
    argv = list(getattr(sys, "argv", []) or [])
    command_line = " ".join(shlex.quote(a) for a in argv) if argv else ""

    env_info = {
        "python_version": sys.version,
        "python_executable": sys.executable,
        "platform": platform.platform(),
        "system": platform.system(),
        "machine": platform.machine(),
        "cwd": os.getcwd(),
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
    }

    manifest = {
        # Generator metadata
        "generator": {
            "name": DIST_NAME,
            "version": generator_version() or "unknown",
        },

        # Invocation and environment details
        "invocation": {
            "argv": argv,
            "command_line": command_line,
        },
        "environment": env_info,

        # Main configuration snapshot
        "context": ctx.to_dict(),
        "namespace_count": len(mappings),
        "namespaces": [m.summary() for m in mappings],
    }

    manifest_path = ctx.output_dir / "manifest.json"
    content = json.dumps(manifest, indent=2) + "\n"
    write_text(manifest_path, content, dry_run=ctx.dry_run)
    return manifest
