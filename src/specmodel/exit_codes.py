"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specmodel.exceptions.SpecmodelError` subclass.
Build scripts wrapping ``specmodel build`` can inspect the exit code to tell
a broken document from a broken rules file without parsing stderr.

Example::

    $ specmodel build openapi.yaml --config rules.yaml
    $ echo $?
    9   # EXIT_CONFIGURATION_ERROR -- a rename targets an existing type
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be loaded or parsed."""

EXIT_CONVERSION_ERROR = 8
"""A schema or operation could not be converted into the type model."""

EXIT_CONFIGURATION_ERROR = 9
"""The build configuration references unknown names or causes a collision."""

EXIT_TYPE_CYCLE = 11
"""The types of a module form a dependency cycle."""
