"""
API version information.

Routes are served under the unversioned ``/api`` prefix; clients read the
current version from ``GET /api/version``.
"""

from typing import Any, Dict

from .. import __version__

API_VERSION = "1"


def get_version_info() -> Dict[str, Any]:
    """
    Get current API version information.

    Returns:
        Dictionary with version information
    """
    return {
        "current_version": API_VERSION,
        "service_version": __version__,
        "supported_versions": [API_VERSION],
        "deprecated_versions": [],
        "versioning_strategy": "Unversioned paths under /api",
    }
