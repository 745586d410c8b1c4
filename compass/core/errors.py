# Error taxonomy for the chat widget and its collaborators.
# Date: 2026-10-19
# Version: 0.1.0

from typing import Optional


class CompassError(Exception):
    """Base class for all errors raised by Course Compass."""


class SetupError(CompassError):
    """
    The conversation could not be created, e.g. missing credentials or an
    unsupported provider. Fatal for the session until initialization is retried.
    """


class GatewayError(CompassError):
    """A call to the remote model failed or returned something unusable."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ToolError(CompassError):
    """A tool handler raised while executing a model-issued call."""

    def __init__(self, tool_name: str, message: str):
        super().__init__(message)
        self.tool_name = tool_name


class RenderError(CompassError):
    """Rasterizing or exporting a study plan document failed."""
