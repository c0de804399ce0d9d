# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Derive translation tables from one or two multi-namespace tables.

Output tables always use the ``obfuscated``/``deobfuscated`` roles. Output
keys are the input names in the chosen source-role namespace; an entry with
no name there is keyed by its source name (tiny treats an absent
destination name as unchanged). Deobfuscated names are never defaulted: a
missing match leaves them absent.
"""

import logging
from dataclasses import dataclass, fields
from typing import TypeVar

from tinymap.index import NamespaceIndex
from tinymap.model import ClassEntry, MappingTable

logger = logging.getLogger(__name__)

_Entry = TypeVar("_Entry")


@dataclass(frozen=True)
class JoinSummary:
    """Count entries emitted and matched by one join."""

    classes: int
    classes_matched: int
    fields: int
    fields_matched: int
    methods: int
    methods_matched: int


def join(
    tree_a: MappingTable,
    from_ns: str,
    match_a: str,
    tree_b: MappingTable,
    to_ns: str,
    match_b: str | None = None,
) -> MappingTable:
    """Join two tables through a shared matching namespace.

    ``tree_b`` is indexed by its ``match_a`` names; every entry of
    ``tree_a`` is looked up by its ``match_b`` name. Members match by name
    only, so a method whose descriptor changed between the two tables still
    joins. Parameters are not carried over.

    Args:
        tree_a: Table supplying the obfuscated-role names.
        from_ns: Namespace of ``tree_a`` used as obfuscated names.
        match_a: Namespace of ``tree_b`` used as index key.
        tree_b: Table supplying the deobfuscated-role names.
        to_ns: Namespace of ``tree_b`` used as deobfuscated names.
        match_b: Namespace of ``tree_a`` used for lookups; defaults to ``match_a``.

    Returns:
        Translation table.

    Raises:
        NamespaceError: If any namespace is missing from its table.
    """
    if match_b is None:
        match_b = match_a
    tree_a.require_namespace(from_ns)
    tree_a.require_namespace(match_b)
    tree_b.require_namespace(match_a)
    tree_b.require_namespace(to_ns)

    index = NamespaceIndex.build(tree_b, match_a)
    output = MappingTable.translation()
    counts = {item.name: 0 for item in fields(JoinSummary)}

    for class_a in list(tree_a.classes.values()):
        klass = output.create_or_get_class(class_a.name_or_source(from_ns))
        counts["classes"] += 1
        class_b = _lookup(index.classes, class_a.name(match_b))
        if class_b is not None and class_b.has_name(to_ns):
            output.set_translated_name(klass, class_b.name(to_ns))
            counts["classes_matched"] += 1

        for field_a in class_a.fields.values():
            field = klass.create_or_get_field(
                field_a.name_or_source(from_ns), tree_a.descriptor(field_a, from_ns)
            )
            counts["fields"] += 1
            field_b = _lookup(index.fields, field_a.name(match_b))
            if field_b is not None and field_b.has_name(to_ns):
                output.set_translated_name(field, field_b.name(to_ns))
                counts["fields_matched"] += 1

        for method_a in class_a.methods.values():
            method = klass.create_or_get_method(
                method_a.name_or_source(from_ns), tree_a.descriptor(method_a, from_ns)
            )
            counts["methods"] += 1
            method_b = _lookup(index.methods, method_a.name(match_b))
            if method_b is not None and method_b.has_name(to_ns):
                output.set_translated_name(method, method_b.name(to_ns))
                counts["methods_matched"] += 1

    summary = JoinSummary(**counts)
    logger.info(
        "Joined mapping tables (classes=%d/%d fields=%d/%d methods=%d/%d)",
        summary.classes_matched,
        summary.classes,
        summary.fields_matched,
        summary.fields,
        summary.methods_matched,
        summary.methods,
    )
    return output


def project(tree: MappingTable, from_ns: str, to_ns: str) -> MappingTable:
    """Read one table as a translation from ``from_ns`` to ``to_ns``.

    Args:
        tree: Multi-namespace table.
        from_ns: Namespace used as obfuscated names.
        to_ns: Namespace used as deobfuscated names.

    Returns:
        Translation table including parameter names.

    Raises:
        NamespaceError: If either namespace is missing from ``tree``.
    """
    tree.require_namespace(from_ns)
    tree.require_namespace(to_ns)
    output = MappingTable.translation()

    for source_class in list(tree.classes.values()):
        klass = output.create_or_get_class(source_class.name_or_source(from_ns))
        if source_class.has_name(to_ns):
            output.set_translated_name(klass, source_class.name(to_ns))

        for source_field in source_class.fields.values():
            field = klass.create_or_get_field(
                source_field.name_or_source(from_ns), tree.descriptor(source_field, from_ns)
            )
            if source_field.has_name(to_ns):
                output.set_translated_name(field, source_field.name(to_ns))

        for source_method in source_class.methods.values():
            method = klass.create_or_get_method(
                source_method.name_or_source(from_ns),
                tree.descriptor(source_method, from_ns),
            )
            if source_method.has_name(to_ns):
                output.set_translated_name(method, source_method.name(to_ns))
            for source_param in source_method.parameters.values():
                param = method.create_or_get_parameter(source_param.position)
                param.set_name(output.source_namespace, source_param.name(from_ns))
                if source_param.has_name(to_ns):
                    output.set_translated_name(param, source_param.name(to_ns))

    logger.debug(
        "Projected mapping table (from=%s to=%s classes=%d)", from_ns, to_ns, len(output)
    )
    return output


def migrate(
    source: MappingTable, target: MappingTable, from_ns: str, to_ns: str
) -> MappingTable:
    """Map ``to_ns`` names of ``source`` onto ``to_ns`` names of ``target``.

    Entries are matched by their ``from_ns`` name, which must be stable
    across both tables. An unmatched entry maps to its own ``to_ns`` name.

    Args:
        source: Older table, supplying the obfuscated-role names.
        target: Newer table, supplying the deobfuscated-role names.
        from_ns: Stable namespace shared by both tables.
        to_ns: Namespace being migrated.

    Returns:
        Translation table.

    Raises:
        NamespaceError: If either namespace is missing from either table.
    """
    for table in (source, target):
        table.require_namespace(from_ns)
        table.require_namespace(to_ns)

    index = NamespaceIndex.build(target, from_ns)
    output = MappingTable.translation()

    for old_class in list(source.classes.values()):
        klass = output.create_or_get_class(old_class.name_or_source(to_ns))
        new_class: ClassEntry = _lookup(index.classes, old_class.name(from_ns)) or old_class
        if new_class.has_name(to_ns):
            output.set_translated_name(klass, new_class.name(to_ns))

        for old_field in old_class.fields.values():
            field = klass.create_or_get_field(
                old_field.name_or_source(to_ns), source.descriptor(old_field, to_ns)
            )
            new_field = _lookup(index.fields, old_field.name(from_ns)) or old_field
            if new_field.has_name(to_ns):
                output.set_translated_name(field, new_field.name(to_ns))

        for old_method in old_class.methods.values():
            method = klass.create_or_get_method(
                old_method.name_or_source(to_ns), source.descriptor(old_method, to_ns)
            )
            new_method = _lookup(index.methods, old_method.name(from_ns)) or old_method
            if new_method.has_name(to_ns):
                output.set_translated_name(method, new_method.name(to_ns))

    logger.info("Migrated mapping table (namespace=%s classes=%d)", to_ns, len(output))
    return output


def _lookup(index: dict[str, _Entry], name: str | None) -> _Entry | None:
    if name is None:
        return None
    return index.get(name)
