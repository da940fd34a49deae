"""Assign named types to modules and order each module's types for emission.

Two steps run after the rule engine:

**Assignment** (:func:`assign_modules`). Types listed in
``BuildConfig.type_module_map`` are assigned outright. Every other named
type, in registry order, goes to the first module (by ascending name) with
a handler that reaches it. Reachability starts from each handler's request
body, response body and parameters, and follows object fields, array
elements and, when ``walk_map_values`` is set, map values.

**Ordering** (:func:`sort_module_types`). For each module, a dependency
graph is built from every type reachable from its handlers' request and
response bodies, with an edge from each dependency to its dependent. A
lexicographic topological sort keyed on type name gives an order that is
identical across runs. A cycle aborts the build with
:class:`~specmodel.exceptions.TypeCycleError`. Anonymous types take part
in the sort and are dropped from the result.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import networkx as nx

from specmodel.builder.graph import Handler, Module, Type
from specmodel.builder.rules import BuildState
from specmodel.exceptions import ConfigurationError, TypeCycleError

logger = logging.getLogger(__name__)


def collect_reachable(roots: Iterable[Optional[Type]], walk_map_values: bool = True) -> list[Type]:
    """Return every type reachable from *roots*, each once, in depth-first discovery order.

    Types are tracked by identity, so cyclic graphs terminate.
    """
    seen: set[Type] = set()
    ordered: list[Type] = []

    def visit(ty: Optional[Type]) -> None:
        if ty is None or ty in seen:
            return
        seen.add(ty)
        ordered.append(ty)
        for dep in ty.dependencies(walk_map_values):
            visit(dep)

    for root in roots:
        visit(root)
    return ordered


def entry_types(handlers: Iterable[Handler]) -> list[Type]:
    """Return the request and response bodies of *handlers*, deduplicated by identity."""
    seen: set[Type] = set()
    entries: list[Type] = []
    for handler in handlers:
        for ty in (handler.request_body, handler.response_body):
            if ty is not None and ty not in seen:
                seen.add(ty)
                entries.append(ty)
    return entries


def handler_types(handler: Handler, walk_map_values: bool = True) -> set[Type]:
    """Return every type a handler uses through its bodies and parameters."""
    roots: list[Optional[Type]] = [handler.request_body, handler.response_body]
    roots.extend(param.type for param in handler.parameters())
    return set(collect_reachable(roots, walk_map_values))


def assign_modules(state: BuildState) -> None:
    """Set ``Type.module`` for every named type a module uses.

    Raises:
        ConfigurationError: If ``type_module_map`` names an unknown type.
    """
    for type_name in state.config.type_module_map:
        if type_name not in state.registry:
            raise ConfigurationError(f"Type '{type_name}' in type_module_map not found")

    for type_name, module_name in state.config.type_module_map.items():
        ty = state.registry.get(type_name)
        ty.module = module_name
        module = state.modules.get(module_name)
        if module is not None and ty not in module.types:
            module.types.append(ty)

    walk = state.config.walk_map_values
    usage: list[tuple[Module, set[Type]]] = []
    for module in state.iter_modules():
        used: set[Type] = set()
        for handler in module.handlers:
            used |= handler_types(handler, walk)
        usage.append((module, used))

    for ty in state.registry:
        if ty.module is not None:
            continue
        for module, used in usage:
            if ty in used:
                ty.module = module.name
                if ty not in module.types:
                    module.types.append(ty)
                break
        else:
            logger.debug("Type '%s' is not used by any module", ty.name)


def sort_module_types(module: Module, walk_map_values: bool = True) -> list[Type]:
    """Return the named types *module* needs, dependencies first.

    Raises:
        TypeCycleError: If the reachable types contain a cycle.
    """
    graph = nx.DiGraph()
    for ty in collect_reachable(entry_types(module.handlers), walk_map_values):
        graph.add_node(ty)
        for dep in ty.dependencies(walk_map_values):
            graph.add_edge(dep, ty)

    try:
        ordered = list(nx.lexicographical_topological_sort(graph, key=lambda ty: ty.name))
    except nx.NetworkXUnfeasible:
        cycle = nx.find_cycle(graph)
        names = [source.display_name for source, _ in cycle]
        names.append(cycle[0][0].display_name)
        raise TypeCycleError(module.name, names) from None

    return [ty for ty in ordered if ty.is_named]


def assign_and_sort(state: BuildState) -> dict[str, Module]:
    """Assign types to modules, sort every module, and return modules by name."""
    assign_modules(state)
    result: dict[str, Module] = {}
    for module in state.iter_modules():
        module.types = sort_module_types(module, state.config.walk_map_values)
        logger.debug(
            "Module '%s': %d handler(s), %d type(s)",
            module.name,
            len(module.handlers),
            len(module.types),
        )
        result[module.name] = module
    return result
