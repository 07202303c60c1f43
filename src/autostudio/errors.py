"""Exceptions raised by the pipeline and its generators."""


class AutoStudioError(Exception):
    """Base class for AutoStudio errors."""


class GenerationError(AutoStudioError):
    """A generator returned a missing, malformed or unusable response."""


class InvalidStateError(AutoStudioError):
    """An operation was requested in a stage that does not allow it."""
