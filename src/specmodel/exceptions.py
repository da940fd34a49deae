"""Exception hierarchy for specmodel.

All exceptions inherit from :class:`SpecmodelError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specmodel.exit_codes`.
The top-level error handler in :func:`specmodel.app.main` catches
``SpecmodelError`` and exits with the appropriate code.

Every error is fatal to a build: the builder never returns a partially
transformed model.

Subclass hierarchy::

    SpecmodelError (exit 1)
    +-- InvalidUsageError             (exit 2)
    +-- SpecParseError                (exit 7)
    +-- ConversionError               (exit 8)
    |   +-- UnsupportedContentTypeError
    +-- ConfigurationError            (exit 9)
    +-- TypeCycleError                (exit 11)
"""

from __future__ import annotations

from specmodel.exit_codes import (
    EXIT_CONFIGURATION_ERROR,
    EXIT_CONVERSION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_TYPE_CYCLE,
)


class SpecmodelError(Exception):
    """Base exception for all specmodel errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecmodelError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(SpecmodelError):
    """Raised when the OpenAPI document cannot be loaded or parsed."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ConversionError(SpecmodelError):
    """Raised when a schema is missing, ``null``, or a ``$ref`` cannot be resolved."""

    exit_code = EXIT_CONVERSION_ERROR


class UnsupportedContentTypeError(ConversionError):
    """Raised when a request body uses a media type the model cannot express."""


class ConfigurationError(SpecmodelError):
    """Raised when a build rule names an unknown type, field, handler or module,
    or when a rename would collide with an existing name."""

    exit_code = EXIT_CONFIGURATION_ERROR


class TypeCycleError(SpecmodelError):
    """Raised when the types reachable from a module form a dependency cycle.

    Attributes:
        module: Name of the module whose type graph is cyclic.
        cycle: Names of the types on one detected cycle, in edge order.
            Anonymous types appear as ``"<anonymous KIND>"``.
    """

    exit_code = EXIT_TYPE_CYCLE

    def __init__(self, module: str, cycle: list[str]):
        self.module = module
        self.cycle = cycle
        path = " -> ".join(cycle) if cycle else "?"
        super().__init__(
            f"Cycle detected in type dependencies for module '{module}': {path}"
        )
