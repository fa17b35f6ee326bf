"""
Exceptions raised by the font directory and the export pipeline.
"""


class OverprintError(Exception):
    """Base class for all errors raised by overprint."""


class UnsupportedPlatform(OverprintError):
    """The platform offers no way to enumerate local fonts."""


class AccessDenied(OverprintError):
    """The user refused access to the local font directory."""


class FontDecodeFailure(OverprintError):
    """A font binary could not be turned into an embeddable font."""

    def __init__(self, postscript_name: str, reason: str = ""):
        self.postscript_name = postscript_name
        message = f"Could not decode font {postscript_name}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class BaseExportFailure(OverprintError):
    """The primary engine failed to produce the base document."""


class CompositingFailure(OverprintError):
    """Drawing the custom annotations onto the base document failed."""


class ExportInProgress(OverprintError):
    """An export of the same document is already running."""


class DocumentNotFound(OverprintError):
    """No document engine is registered under the requested id."""
