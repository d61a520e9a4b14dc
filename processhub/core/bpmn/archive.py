"""
Zip export of BPMN diagram files.
"""

import io
import re
import zipfile
from typing import Iterable

from ..models.tortoise_models import BpmnNode

EXPORT_FILENAME = "bpmn-files.zip"

_PATH_SEPARATORS = re.compile(r"[/\\]+")


def entry_base_name(node: BpmnNode) -> str:
    """
    Get a safe archive name for a diagram file.

    Path separators become ``_`` and leading dots are dropped, so an entry
    always lands at the top of the archive. Falls back to the node id.
    """
    name = _PATH_SEPARATORS.sub("_", node.name or "").strip().lstrip(".")
    return name or str(node.id)


def build_export_zip(files: Iterable[BpmnNode]) -> bytes:
    """
    Write diagram files into an in-memory zip archive.

    Each file becomes ``<name>.bpmn.xml`` (the id when the name is empty).
    A name used twice gets the node id appended.

    Args:
        files: File nodes to export

    Returns:
        Zip archive content
    """
    buffer = io.BytesIO()
    used = set()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for node in files:
            base = entry_base_name(node)
            entry = f"{base}.bpmn.xml"
            if entry in used:
                entry = f"{base}-{node.id}.bpmn.xml"
            used.add(entry)
            archive.writestr(entry, node.content or "")
    return buffer.getvalue()
