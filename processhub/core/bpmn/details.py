"""
Default file details and version numbering for BPMN files.
"""

import re
from typing import Any, Dict, Optional

DEFAULT_VERSION = "1.0.0"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _leading_int(text: str) -> Optional[int]:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else None


def bump_version(version: Optional[str]) -> str:
    """
    Increment the patch number of a ``major.minor.patch`` version.

    Each part is read from its leading digits. A missing or zero major
    number counts as 1; missing minor and patch numbers count as 0.

    Args:
        version: Current version string

    Returns:
        Version with the patch number incremented

    Example:
        >>> bump_version("1.2.9")
        '1.2.10'
    """
    parts = (version or DEFAULT_VERSION).split(".")
    parts += [""] * (3 - len(parts))

    major = _leading_int(parts[0]) or 1
    minor = _leading_int(parts[1]) or 0
    patch = _leading_int(parts[2]) or 0
    return f"{major}.{minor}.{patch + 1}"


def default_advanced_details(
    created_by: str, date_of_creation: Any = ""
) -> Dict[str, Any]:
    """Advanced details of a newly created file."""
    return {
        "versionNo": DEFAULT_VERSION,
        "processStatus": "",
        "classification": "",
        "dateOfCreation": date_of_creation or "",
        "dateOfReview": "",
        "effectiveDate": "",
        "modificationDate": "",
        "modifiedBy": "",
        "changeDescription": "",
        "createdBy": created_by or "",
    }


def default_sign_off_data() -> Dict[str, str]:
    """Empty sign-off table row."""
    return {
        "responsibility": "",
        "date": "",
        "name": "",
        "designation": "",
        "signature": "",
    }


def default_history_data() -> Dict[str, str]:
    """Empty history table row."""
    return {"versionNo": "", "date": "", "statusRemarks": "", "author": ""}


def default_trigger_data() -> Dict[str, str]:
    """Empty trigger table row."""
    return {"triggers": "", "inputs": "", "outputs": ""}
