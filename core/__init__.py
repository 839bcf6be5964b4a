"""Core module - backend-neutral person model and plumbing.

This module contains the canonical person model, attribute mapping,
configuration, error types and logging. It is intentionally backend-agnostic.

Backend-specific logic (iTop, ...) belongs in /connectors/.
"""

__version__ = "1.0.0"
