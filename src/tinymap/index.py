# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Build whole-table lookups from names in one namespace."""

import logging
from dataclasses import dataclass

from tinymap.model import ClassEntry, FieldEntry, MappingTable, MethodEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NamespaceIndex:
    """Map names in one namespace to the entries declaring them.

    Members are indexed across the whole table, not per class. When two
    entries declare the same name the one inserted last wins.

    Args:
        namespace: Indexed namespace.
        classes: Class name to class entry.
        fields: Field name to field entry.
        methods: Method name to method entry.
    """

    namespace: str
    classes: dict[str, ClassEntry]
    fields: dict[str, FieldEntry]
    methods: dict[str, MethodEntry]

    @classmethod
    def build(cls, table: MappingTable, namespace: str) -> "NamespaceIndex":
        """Index every entry of ``table`` that has a name in ``namespace``.

        Args:
            table: Table to index.
            namespace: Namespace whose names become keys.

        Returns:
            Built index.

        Raises:
            NamespaceError: If ``namespace`` is not declared by ``table``.
        """
        table.require_namespace(namespace)
        classes: dict[str, ClassEntry] = {}
        fields: dict[str, FieldEntry] = {}
        methods: dict[str, MethodEntry] = {}
        collisions = 0

        for klass in table.classes.values():
            collisions += _put(classes, klass.name(namespace), klass)
            for field in klass.fields.values():
                collisions += _put(fields, field.name(namespace), field)
            for method in klass.methods.values():
                collisions += _put(methods, method.name(namespace), method)

        if collisions:
            logger.debug(
                "Namespace index replaced colliding names (namespace=%s collisions=%d)",
                namespace,
                collisions,
            )
        return cls(namespace=namespace, classes=classes, fields=fields, methods=methods)


def _put(target: dict, name: str | None, entry: object) -> int:
    if name is None:
        return 0
    collided = name in target
    target[name] = entry
    return int(collided)
