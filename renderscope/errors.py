"""
Renderscope Exceptions
======================

The engine is a diagnostics layer: most failure modes degrade to a warning
alert or an empty result. The classes below cover the few conditions that are
reported to the caller as exceptions.
"""


class RenderscopeError(Exception):
    """Base class for errors raised by renderscope itself."""

    pass


class ConfigurationError(RenderscopeError, ValueError):
    """Raised when an engine component is configured with an invalid value."""

    pass
