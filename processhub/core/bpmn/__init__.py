"""
BPMN tree, file details and export helpers.
"""

from .archive import EXPORT_FILENAME, build_export_zip
from .details import (
    DEFAULT_VERSION,
    bump_version,
    default_advanced_details,
    default_history_data,
    default_sign_off_data,
    default_trigger_data,
)
from .tree import (
    build_admin_tree,
    build_paths,
    build_user_tree,
    file_listing_entry,
    is_file,
    isoformat,
    serialize_admin_file,
    serialize_node,
)

__all__ = [
    "EXPORT_FILENAME",
    "build_export_zip",
    "DEFAULT_VERSION",
    "bump_version",
    "default_advanced_details",
    "default_history_data",
    "default_sign_off_data",
    "default_trigger_data",
    "build_admin_tree",
    "build_paths",
    "build_user_tree",
    "file_listing_entry",
    "is_file",
    "isoformat",
    "serialize_admin_file",
    "serialize_node",
]
