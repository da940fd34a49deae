"""End-to-end model building: document in, sorted modules out.

:class:`ModelBuilder` chains the builder stages over one OpenAPI document:

1. convert every component schema into a registered named type;
2. convert every operation into a handler and file it under its module;
3. apply the transformation rules from :class:`~specmodel.models.BuildConfig`;
4. assign named types to modules and sort each module's types.

Example::

    from specmodel.builder.pipeline import ModelBuilder
    from specmodel.parser import load_document

    modules = ModelBuilder().build(load_document("openapi.yaml"))
    for module in modules.values():
        print(module.name, [ty.name for ty in module.types])
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specmodel.builder.graph import Module
from specmodel.builder.modules import assign_and_sort
from specmodel.builder.operations import OperationConverter
from specmodel.builder.registry import TypeRegistry
from specmodel.builder.rules import BuildState, apply_rules
from specmodel.builder.schema import SchemaConverter
from specmodel.exceptions import ConfigurationError
from specmodel.models import BuildConfig

logger = logging.getLogger(__name__)


class ModelBuilder:
    """Build the normalized module/type model for an OpenAPI document.

    A builder can be reused; every :meth:`build` call starts from a fresh
    registry. The state of the most recent successful build is kept on
    :attr:`state` for callers that need the registry; a failed build leaves
    it ``None``.
    """

    def __init__(self, config: Optional[BuildConfig] = None) -> None:
        self.config = config or BuildConfig()
        self.state: Optional[BuildState] = None

    def build(self, document: dict[str, Any]) -> dict[str, Module]:
        """Run every stage and return modules keyed by name, in ascending name order.

        Raises:
            ConversionError: If a schema or operation cannot be converted.
            ConfigurationError: If a rule refers to something that does not exist.
            TypeCycleError: If a module's types depend on each other in a cycle.
        """
        self.state = None
        registry = TypeRegistry()
        schemas = SchemaConverter(document, registry, self.config)
        schemas.convert_components()
        logger.debug("Converted %d component schema(s)", len(registry))

        state = BuildState(registry=registry, config=self.config)

        operations = OperationConverter(document, schemas, self.config)
        count = 0
        seen_ids: set[str] = set()
        for path, method, operation, path_params in operations.iter_operations():
            handler = operations.convert(path, method, operation, path_params)
            module_name = operations.module_name(operation)
            module = state.modules.get(module_name)
            if module is None:
                module = state.modules[module_name] = Module(name=module_name)
            module.handlers.append(handler)
            count += 1
            if operation.get("operationId"):
                seen_ids.add(operation["operationId"])
        logger.debug("Converted %d operation(s) into %d module(s)", count, len(state.modules))

        for operation_id in self.config.handler_module_map:
            if operation_id not in seen_ids:
                raise ConfigurationError(
                    f"Handler '{operation_id}' in handler_module_map not found"
                )

        apply_rules(state)
        modules = assign_and_sort(state)
        self.state = state
        return modules


def build_modules(document: dict[str, Any], config: Optional[BuildConfig] = None) -> dict[str, Module]:
    """Shorthand for ``ModelBuilder(config).build(document)``."""
    return ModelBuilder(config).build(document)
