"""Declarative transformation rules applied to the built type graph.

The rule engine is an ordered pipeline of stages. Each stage takes the
:class:`BuildState`, applies one category of rules from
:class:`~specmodel.models.BuildConfig`, and returns the state. The order is
fixed because later stages see the results of earlier ones:

1. :func:`name_unnamed_responses` -- promote anonymous response types to
   named, registered types.
2. :func:`change_field_requirements` -- force fields required/optional or
   give them a literal default.
3. :func:`order_handlers` -- reorder the handlers of a module.
4. :func:`change_response_types` -- swap a handler's response type for
   another named type (looked up by its pre-rename name).
5. :func:`rename_types` -- bulk rename named types.
6. :func:`rename_handlers` -- bulk rename handlers.

Every stage validates its whole rule category before changing anything and
raises :class:`~specmodel.exceptions.ConfigurationError` on the first bad
entry, so a failing category leaves the graph as it found it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

from specmodel.builder.graph import Field, Handler, Module
from specmodel.builder.inference import envelope_payload
from specmodel.builder.registry import TypeRegistry
from specmodel.exceptions import ConfigurationError
from specmodel.models import BuildConfig, FieldModification, FieldRequirement, TypeKind

logger = logging.getLogger(__name__)

ResponseNamer = Callable[[Handler], Optional[str]]
"""Returns the name for a handler's anonymous response, or ``None`` to skip it."""


@dataclass
class BuildState:
    """Everything the rule stages read and transform.

    Attributes:
        registry: The named types of the build.
        modules: Modules keyed by name.
        config: The build configuration supplying the rules.
    """

    registry: TypeRegistry
    modules: dict[str, Module] = field(default_factory=dict)
    config: BuildConfig = field(default_factory=BuildConfig)

    def iter_modules(self) -> Iterator[Module]:
        """Yield modules in ascending name order."""
        for name in sorted(self.modules):
            yield self.modules[name]

    def find_handlers(self, name: str) -> list[Handler]:
        """Return every handler called *name*, across all modules."""
        return [
            handler
            for module in self.iter_modules()
            for handler in module.handlers
            if handler.name == name
        ]


Stage = Callable[[BuildState], BuildState]


def suffix_namer(suffix: str) -> ResponseNamer:
    """Build a namer that calls un-enveloped anonymous responses ``<handler><suffix>``.

    Responses that wrap their payload in a ``data`` field are left anonymous;
    renderers unwrap them instead.
    """

    def namer(handler: Handler) -> Optional[str]:
        if envelope_payload(handler) is None:
            return f"{handler.name}{suffix}"
        return None

    return namer


def name_unnamed_responses(state: BuildState) -> BuildState:
    """Stage 1: give anonymous response types a name and register them."""
    namer = state.config.unnamed_response_namer
    if namer is None and state.config.unnamed_response_suffix:
        namer = suffix_namer(state.config.unnamed_response_suffix)
    if namer is None:
        return state

    planned: list[tuple[Module, Handler, str]] = []
    taken: set[str] = set()
    for module in state.iter_modules():
        for handler in module.handlers:
            body = handler.response_body
            if body is None or body.is_named:
                continue
            name = namer(handler)
            if not name:
                continue
            if name in state.registry or name in taken:
                raise ConfigurationError(
                    f"Cannot name response of handler '{handler.name}' "
                    f"'{name}': type already exists"
                )
            taken.add(name)
            planned.append((module, handler, name))

    for module, handler, name in planned:
        body = handler.response_body
        body.name = name
        state.registry.register(body)
        module.types.append(body)
        logger.debug("Named response of '%s' as '%s'", handler.name, name)
    return state


def change_field_requirements(state: BuildState) -> BuildState:
    """Stage 2: apply per-field requirement and default overrides."""
    planned: list[tuple[Field, FieldModification]] = []
    for type_name, modifications in state.config.change_fields.items():
        ty = state.registry.get(type_name)
        if ty.kind != TypeKind.OBJECT:
            raise ConfigurationError(f"Type '{type_name}' is not an object type")
        for field_name, modification in modifications.items():
            target = ty.get_field(field_name)
            if target is None:
                raise ConfigurationError(
                    f"Field '{field_name}' not found in type '{type_name}'"
                )
            planned.append((target, modification))

    for target, modification in planned:
        if modification.requirement == FieldRequirement.REQUIRED:
            target.required = True
        elif modification.requirement == FieldRequirement.OPTIONAL:
            target.required = False
        if modification.default is not None:
            target.default = modification.default
    return state


def order_handlers(state: BuildState) -> BuildState:
    """Stage 3: reorder handlers within modules.

    Listed handlers come first, in list order. Unlisted handlers follow,
    sorted by name. The sort is stable, so equal keys keep their order.
    """
    ordering = state.config.handler_ordering
    for module_name in ordering:
        if module_name not in state.modules:
            raise ConfigurationError(f"Module '{module_name}' not found")

    for module_name, ordered_names in ordering.items():
        positions: dict[str, int] = {}
        for index, name in enumerate(ordered_names):
            positions.setdefault(name, index)

        def sort_key(handler: Handler) -> tuple[int, int, str]:
            if handler.name in positions:
                return (0, positions[handler.name], "")
            return (1, 0, handler.name)

        state.modules[module_name].handlers.sort(key=sort_key)
    return state


def change_response_types(state: BuildState) -> BuildState:
    """Stage 4: replace handlers' response types with named types."""
    planned: list[tuple[list[Handler], str]] = []
    for handler_name, type_name in state.config.change_response_types.items():
        if type_name not in state.registry:
            raise ConfigurationError(
                f"Type '{type_name}' not found for handler '{handler_name}'"
            )
        handlers = state.find_handlers(handler_name)
        if not handlers:
            raise ConfigurationError(f"Handler '{handler_name}' not found")
        planned.append((handlers, type_name))

    for handlers, type_name in planned:
        new_type = state.registry.get(type_name)
        for handler in handlers:
            handler.response_body = new_type
    return state


def rename_types(state: BuildState) -> BuildState:
    """Stage 5: rename named types; the whole batch is collision-checked first."""
    state.registry.rename_all(state.config.rename_types)
    return state


def rename_handlers(state: BuildState) -> BuildState:
    """Stage 6: rename handlers by their current name."""
    renames = state.config.rename_handlers
    if not renames:
        return state

    for old_name in renames:
        if not state.find_handlers(old_name):
            raise ConfigurationError(f"Cannot rename handler '{old_name}': handler not found")

    for module in state.iter_modules():
        for handler in module.handlers:
            new_name = renames.get(handler.name)
            if new_name is not None:
                handler.name = new_name
    return state


RULE_STAGES: tuple[Stage, ...] = (
    name_unnamed_responses,
    change_field_requirements,
    order_handlers,
    change_response_types,
    rename_types,
    rename_handlers,
)


def apply_rules(state: BuildState, stages: tuple[Stage, ...] = RULE_STAGES) -> BuildState:
    """Run *stages* over *state* in order, stopping at the first error."""
    for stage in stages:
        logger.debug("Applying rule stage %s", stage.__name__)
        state = stage(state)
    return state
