"""specgraph -- Resolve OpenAPI 3.x schemas into a graph of generatable models.

The package reads the schemas an OpenAPI document declares and converts each
one, exactly once, into a type reference (scalar, array, object, union,
intersection or named reference).  References between schemas, recursive ones
included, become edges of a graph keyed by JSON pointer, ready for a code
emitter to walk.

Typical use::

    from specgraph.parser import load_document, parse_document

    state = parse_document(load_document("openapi.yaml"))
    for entry in state.models.models():
        print(entry.pointer, entry.type.describe())

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for configuration and type references.
    config: XDG-aware configuration resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting with Rich support.
    parser: Pointer resolution, model cache, converter and driver.
"""

__version__ = "0.1.0"
