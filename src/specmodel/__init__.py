"""specmodel -- Build a normalized type model from OpenAPI 3.x documents.

This package converts an OpenAPI document into modules of handlers and
named types that code generators render into client-library source. Types
are deduplicated by name, anonymous response shapes can be promoted to named
types, declarative rules rename and reshape the graph, and every module's
types come out in dependency order.

Typical workflow::

    specmodel inspect openapi.yaml                 # look at the modules
    specmodel build openapi.yaml -o build/model    # one JSON file per module

Modules:
    app: Typer application and CLI entry point.
    builder: Type graph construction, rules and module assignment.
    parser: Document loading and ``$ref`` resolution.
    models: Enumerations and the Pydantic build configuration.
    config: Rules-file loading and atomic output writes.
    serialize: JSON views of the built model.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.1.0"
