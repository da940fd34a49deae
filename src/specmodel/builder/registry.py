"""Single-owner registry of named types.

A :class:`TypeRegistry` is created by one
:class:`~specmodel.builder.pipeline.ModelBuilder` and lives exactly as long
as that build. It never exposes its underlying mapping; callers go through
accessors that keep the one-name-one-type invariant intact:

* :meth:`TypeRegistry.register` refuses a second type under a taken name.
* :meth:`TypeRegistry.get` raises :class:`~specmodel.exceptions.ConfigurationError`
  for unknown names, :meth:`TypeRegistry.find` returns ``None`` instead.
* :meth:`TypeRegistry.rename_all` validates a whole rename batch before
  touching anything.

Iteration yields types in registration order, which follows document order
and is therefore stable across runs.
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional

from specmodel.builder.graph import Type
from specmodel.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class TypeRegistry:
    """Arena of named :class:`~specmodel.builder.graph.Type` nodes, keyed by name."""

    def __init__(self) -> None:
        self._types: dict[str, Type] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[Type]:
        return iter(list(self._types.values()))

    def __len__(self) -> int:
        return len(self._types)

    def names(self) -> list[str]:
        """Return every registered name in registration order."""
        return list(self._types)

    def find(self, name: str) -> Optional[Type]:
        """Return the type registered under *name*, or ``None``."""
        return self._types.get(name)

    def get(self, name: str) -> Type:
        """Return the type registered under *name*.

        Raises:
            ConfigurationError: If no type is registered under *name*.
        """
        ty = self._types.get(name)
        if ty is None:
            raise ConfigurationError(f"Type '{name}' not found")
        return ty

    def register(self, ty: Type) -> Type:
        """Register a named type under ``ty.name`` and mark it named.

        Registering the same object twice is a no-op.

        Raises:
            ConfigurationError: If the name is empty or already taken by a
                different type.
        """
        if not ty.name:
            raise ConfigurationError("Cannot register a type without a name")
        existing = self._types.get(ty.name)
        if existing is not None:
            if existing is ty:
                return ty
            raise ConfigurationError(f"Type '{ty.name}' is already registered")
        ty.is_named = True
        self._types[ty.name] = ty
        logger.debug("Registered type '%s' (%s)", ty.name, ty.kind.value)
        return ty

    def rename_all(self, renames: dict[str, str]) -> None:
        """Rename a batch of types atomically.

        The whole batch is checked first: every source must exist, no
        destination may already be registered, and no two sources may share
        a destination. Only then are the renames applied, so an error leaves
        the registry untouched.

        Raises:
            ConfigurationError: On an unknown source name or a collision.
        """
        if not renames:
            return

        for old_name in renames:
            if old_name not in self._types:
                raise ConfigurationError(f"Cannot rename type '{old_name}': type not found")

        seen: set[str] = set()
        for new_name in renames.values():
            if new_name in self._types:
                raise ConfigurationError(
                    f"Cannot rename to '{new_name}': type already exists"
                )
            if new_name in seen:
                raise ConfigurationError(
                    f"Cannot rename to '{new_name}': used by more than one rename"
                )
            seen.add(new_name)

        # Rebuild in place so iteration order keeps each type's original slot.
        renamed: dict[str, Type] = {}
        for name, ty in self._types.items():
            new_name = renames.get(name)
            if new_name is not None:
                ty.name = new_name
                name = new_name
            renamed[name] = ty
        self._types = renamed
        logger.debug("Renamed %d type(s)", len(renames))
