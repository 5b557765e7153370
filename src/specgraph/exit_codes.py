"""Numeric process exit codes for the ``specgraph`` command.

Each constant maps to one error category and is referenced by the matching
:class:`~specgraph.exceptions.SpecgraphError` subclass, so wrapper scripts
can tell a broken document from a broken schema graph without parsing
stderr.

Example::

    $ specgraph models openapi.yaml
    $ echo $?
    8   # EXIT_MODEL_ERROR -- a $ref points nowhere
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be loaded, parsed or version-checked."""

EXIT_MODEL_ERROR = 8
"""A schema reference could not be resolved to a model."""

EXIT_CONVERTER_ERROR = 9
"""A schema has a shape that cannot be turned into a type."""
