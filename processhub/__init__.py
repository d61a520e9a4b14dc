"""
ProcessHub - Business Process Management Backend

A multi-tenant API for BPMN diagram storage, decision rules, KPI tracking,
approval notifications and AI chat history.
"""

__version__ = "0.1.0"
__author__ = "ProcessHub Team"
__email__ = "team@processhub.dev"
__description__ = "Business process management backend"

# Core imports
from .core.config import ProcessHubConfig
from .core.logging import setup_logging

# Initialize logging
setup_logging()

__all__ = [
    "__version__",
    "__author__",
    "__email__",
    "__description__",
    "ProcessHubConfig",
    "setup_logging",
]
