# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Namespace-indexed mapping table model.

A table declares an ordered list of namespaces. The first one is the source
namespace and is always populated; every other namespace is a destination
namespace whose names may be absent. Absence is stored as ``None`` and never
silently replaced by the source name: callers that want the "unchanged"
reading use ``name_or_source`` explicitly.
"""

import logging
import re
from collections.abc import Callable, Iterator, Sequence

from tinymap.errors import NamespaceError

logger = logging.getLogger(__name__)

OBFUSCATED = "obfuscated"
DEOBFUSCATED = "deobfuscated"

_CLASS_REFERENCE = re.compile(r"L([^;]+);")


class NamedEntry:
    """Hold one optional name per namespace."""

    def __init__(self) -> None:
        self.names: dict[str, str | None] = {}

    def name(self, namespace: str) -> str | None:
        """Return the name in ``namespace`` or ``None`` when absent."""
        return self.names.get(namespace)

    def has_name(self, namespace: str) -> bool:
        return self.names.get(namespace) is not None

    def set_name(self, namespace: str, name: str | None) -> None:
        """Record a name, overwriting any previous value (last write wins)."""
        self.names[namespace] = name


class ParameterEntry(NamedEntry):
    """Represent one method parameter by zero-based position."""

    def __init__(self, position: int) -> None:
        super().__init__()
        self.position = position

    def __repr__(self) -> str:
        return f"ParameterEntry(position={self.position}, names={self.names})"


class MemberEntry(NamedEntry):
    """Shared state of fields and methods."""

    def __init__(self, owner: "ClassEntry", name: str, descriptor: str | None) -> None:
        super().__init__()
        self.owner = owner
        self.descriptor = descriptor
        self.names[owner.source_namespace] = name

    @property
    def source_name(self) -> str:
        return self.names[self.owner.source_namespace]  # type: ignore[return-value]

    def name_or_source(self, namespace: str) -> str:
        """Return the name in ``namespace``, treating absence as unchanged."""
        name = self.names.get(namespace)
        return name if name is not None else self.source_name

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(owner={self.owner.source_name!r}, "
            f"descriptor={self.descriptor!r}, names={self.names})"
        )


class FieldEntry(MemberEntry):
    """Represent one field of a class."""

    def has_mappings(self, namespace: str) -> bool:
        return self.has_name(namespace)


class MethodEntry(MemberEntry):
    """Represent one method of a class and its parameters."""

    def __init__(self, owner: "ClassEntry", name: str, descriptor: str | None) -> None:
        super().__init__(owner, name, descriptor)
        self.parameters: dict[int, ParameterEntry] = {}

    def create_or_get_parameter(self, position: int) -> ParameterEntry:
        """Return the parameter at ``position``, creating it when missing.

        Raises:
            ValueError: If ``position`` is negative.
        """
        if position < 0:
            raise ValueError(f"Parameter position must be non-negative: {position}")
        parameter = self.parameters.get(position)
        if parameter is None:
            parameter = ParameterEntry(position)
            self.parameters[position] = parameter
        return parameter

    def has_mappings(self, namespace: str) -> bool:
        """Check whether the method or any of its parameters is renamed."""
        if self.has_name(namespace):
            return True
        return any(param.has_name(namespace) for param in self.parameters.values())


class ClassEntry(NamedEntry):
    """Represent one compiled class with its members and inner classes.

    Names are stored fully qualified in every namespace. Members are unique
    by their source-namespace ``(name, descriptor)`` pair.
    """

    def __init__(
        self, source_namespace: str, name: str, outer: "ClassEntry | None" = None
    ) -> None:
        super().__init__()
        self.source_namespace = source_namespace
        self.outer = outer
        self.names[source_namespace] = name
        self.fields: dict[tuple[str, str | None], FieldEntry] = {}
        self.methods: dict[tuple[str, str | None], MethodEntry] = {}
        self.inner_classes: dict[str, ClassEntry] = {}

    @property
    def source_name(self) -> str:
        return self.names[self.source_namespace]  # type: ignore[return-value]

    def name_or_source(self, namespace: str) -> str:
        """Return the name in ``namespace``, treating absence as unchanged.

        An inner class without its own name inherits its outer class's name
        in ``namespace`` and keeps its own simple source name.
        """
        name = self.names.get(namespace)
        if name is not None:
            return name
        if self.outer is None:
            return self.source_name
        simple = self.source_name.rpartition("$")[2]
        return f"{self.outer.name_or_source(namespace)}${simple}"

    def create_or_get_field(self, name: str, descriptor: str | None) -> FieldEntry:
        key = (name, descriptor)
        entry = self.fields.get(key)
        if entry is None:
            entry = FieldEntry(self, name, descriptor)
            self.fields[key] = entry
        return entry

    def create_or_get_method(self, name: str, descriptor: str | None) -> MethodEntry:
        key = (name, descriptor)
        entry = self.methods.get(key)
        if entry is None:
            entry = MethodEntry(self, name, descriptor)
            self.methods[key] = entry
        return entry

    def has_mappings(self, namespace: str) -> bool:
        """Check whether anything in this class subtree carries a name."""
        if self.has_name(namespace):
            return True
        if any(method.has_mappings(namespace) for method in self.methods.values()):
            return True
        if any(field.has_mappings(namespace) for field in self.fields.values()):
            return True
        return any(inner.has_mappings(namespace) for inner in self.inner_classes.values())

    def __repr__(self) -> str:
        return f"ClassEntry(names={self.names})"


class MappingTable:
    """Store classes by source-namespace name across ordered namespaces."""

    def __init__(self, namespaces: Sequence[str]) -> None:
        """Initialize an empty table.

        Args:
            namespaces: Ordered namespace labels; the first is the source.

        Raises:
            ValueError: If no namespace is given or labels repeat.
        """
        if not namespaces:
            raise ValueError("A mapping table needs at least one namespace")
        if len(set(namespaces)) != len(namespaces):
            raise ValueError(f"Duplicate namespaces: {list(namespaces)}")
        self.namespaces: tuple[str, ...] = tuple(namespaces)
        self.classes: dict[str, ClassEntry] = {}

    @classmethod
    def translation(cls) -> "MappingTable":
        """Create an empty two-role obfuscated/deobfuscated table."""
        return cls((OBFUSCATED, DEOBFUSCATED))

    @property
    def source_namespace(self) -> str:
        return self.namespaces[0]

    @property
    def target_namespace(self) -> str:
        """Return the first destination namespace.

        Raises:
            NamespaceError: If the table only has a source namespace.
        """
        if len(self.namespaces) < 2:
            raise NamespaceError("<target>", self.namespaces)
        return self.namespaces[1]

    def require_namespace(self, namespace: str) -> None:
        if namespace not in self.namespaces:
            raise NamespaceError(namespace, self.namespaces)

    def get_class(self, source_name: str) -> ClassEntry | None:
        return self.classes.get(source_name)

    def create_or_get_class(self, source_name: str) -> ClassEntry:
        """Return the class with ``source_name``, creating it when missing.

        A ``$``-qualified name is created as an inner class of its outer
        class, which is created as well when needed.
        """
        entry = self.classes.get(source_name)
        if entry is not None:
            return entry
        outer_name, _, simple = source_name.rpartition("$")
        outer = self.create_or_get_class(outer_name) if outer_name and simple else None
        entry = ClassEntry(self.source_namespace, source_name, outer)
        if outer is not None:
            outer.inner_classes[source_name] = entry
        self.classes[source_name] = entry
        return entry

    def top_level_classes(self) -> Iterator[ClassEntry]:
        return (entry for entry in self.classes.values() if entry.outer is None)

    def set_translated_name(self, entry: NamedEntry, name: str | None) -> None:
        """Record ``name`` in the target namespace of ``entry`` (last write wins)."""
        entry.set_name(self.target_namespace, name)

    def descriptor(self, member: FieldEntry | MethodEntry, namespace: str) -> str | None:
        """Return the member descriptor expressed in ``namespace``.

        Class references are looked up by source name; a class unknown to the
        table, or without a name in ``namespace``, keeps its source name.

        Raises:
            NamespaceError: If ``namespace`` is not declared by the table.
        """
        self.require_namespace(namespace)
        if member.descriptor is None or namespace == self.source_namespace:
            return member.descriptor
        return remap_descriptor(
            member.descriptor, lambda name: self._class_name(name, namespace)
        )

    def _class_name(self, source_name: str, namespace: str) -> str | None:
        entry = self.classes.get(source_name)
        return entry.name(namespace) if entry is not None else None

    def __len__(self) -> int:
        return len(self.classes)

    def __repr__(self) -> str:
        return f"MappingTable(namespaces={self.namespaces}, classes={len(self.classes)})"


def remap_descriptor(descriptor: str, mapper: Callable[[str], str | None]) -> str:
    """Rewrite ``L<class>;`` references of a field or method descriptor.

    Args:
        descriptor: JVM-style type or method descriptor.
        mapper: Returns the new class name or ``None`` to keep the original.

    Returns:
        Descriptor with mapped class references.
    """

    def _replace(match: re.Match[str]) -> str:
        mapped = mapper(match.group(1))
        return f"L{mapped if mapped is not None else match.group(1)};"

    return _CLASS_REFERENCE.sub(_replace, descriptor)
