"""Static HTML documentation sites from parsed doclets."""

from .orchestrator import Orchestrator, PublishResult, publish

__version__ = "0.1.0"

__all__ = ["Orchestrator", "PublishResult", "__version__", "publish"]
