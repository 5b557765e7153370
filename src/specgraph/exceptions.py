"""Exception hierarchy for specgraph.

All exceptions inherit from :class:`SpecgraphError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specgraph.exit_codes`.
A parser run that raises any of these is finished: the exception is the single
terminal result of the run and its :class:`~specgraph.parser.state.ParserState`
must be thrown away.

Subclass hierarchy::

    SpecgraphError (exit 1)
    +-- InvalidUsageError     (exit 2)
    +-- SpecParseError        (exit 7)
    +-- PointerError          (exit 8)
    +-- ModelResolutionError  (exit 8)
    +-- ConverterError        (exit 9)
    +-- ConfigError           (exit 1)
"""

from specgraph.exit_codes import (
    EXIT_CONVERTER_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MODEL_ERROR,
    EXIT_SPEC_PARSE_ERROR,
)


class SpecgraphError(Exception):
    """Base exception for all specgraph errors.

    Every subclass sets a class-level ``exit_code``. The CLI entry point
    catches this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecgraphError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(SpecgraphError):
    """Raised when the OpenAPI document cannot be loaded or fails the version check."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class PointerError(SpecgraphError):
    """Raised for a malformed ``$ref`` or one that points to no location in the document."""

    exit_code = EXIT_MODEL_ERROR


class ModelResolutionError(SpecgraphError):
    """Raised when a model pointer has no schema behind it, or the run state can no longer be used."""

    exit_code = EXIT_MODEL_ERROR


class ConverterError(SpecgraphError):
    """Raised for an unrecognised or self-contradictory schema shape.

    The message always names the location pointer of the offending schema.
    """

    exit_code = EXIT_CONVERTER_ERROR


class ConfigError(SpecgraphError):
    """Raised for configuration problems (invalid JSON, unknown keys)."""

    exit_code = EXIT_GENERIC_FAILURE
