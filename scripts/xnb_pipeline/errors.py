"""
Exception hierarchy for the XNB pipeline.

Every layer raises the first failure it sees; the CLI maps the classes
below onto process exit codes.
"""

from pathlib import Path
from typing import Optional, Union


class XnbPipelineError(Exception):
    """Base exception for pipeline errors."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None


class InputError(XnbPipelineError):
    """Source file is missing, unreadable or not a decodable image."""


class UnsupportedFeatureError(XnbPipelineError):
    """A container feature was requested that this encoder does not implement."""


class UsageError(XnbPipelineError):
    """Command line arguments are missing or inconsistent."""


class OutputError(XnbPipelineError):
    """Destination could not be created or written."""
