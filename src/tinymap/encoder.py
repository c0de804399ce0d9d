# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Encode mapping tables as tiny v1 or v2 text.

Output always has two columns: the table's source namespace and one
destination namespace. Records are rendered completely before anything is
written, so a failed encode leaves the stream untouched.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, TextIO

from tinymap.errors import MissingDescriptorError
from tinymap.formats import TinyFormat
from tinymap.model import ClassEntry, FieldEntry, MappingTable, MemberEntry, MethodEntry

logger = logging.getLogger(__name__)


def _class_key(entry: ClassEntry) -> Any:
    return entry.source_name


def _member_key(entry: MemberEntry) -> Any:
    return (entry.source_name, entry.descriptor or "")


@dataclass(frozen=True)
class EncoderConfig:
    """Sort keys used to order emitted records.

    Attributes:
        class_key: Key for classes; default is the full obfuscated name.
        method_key: Key for methods within one class.
        field_key: Key for fields within one class.
    """

    class_key: Callable[[ClassEntry], Any] = field(default=_class_key)
    method_key: Callable[[MethodEntry], Any] = field(default=_member_key)
    field_key: Callable[[FieldEntry], Any] = field(default=_member_key)


DEFAULT_CONFIG = EncoderConfig()


def encode(
    table: MappingTable,
    stream: TextIO,
    kind: TinyFormat,
    from_label: str,
    to_label: str,
    namespace: str | None = None,
    config: EncoderConfig = DEFAULT_CONFIG,
) -> int:
    """Write ``table`` to ``stream``.

    Args:
        table: Table to encode.
        stream: Text sink.
        kind: ``TinyFormat.TINY`` or ``TinyFormat.TINY_2``.
        from_label: Header label of the obfuscated column.
        to_label: Header label of the deobfuscated column.
        namespace: Destination namespace to write; defaults to the table's
            target namespace.
        config: Record ordering.

    Returns:
        Number of record lines written, header excluded.

    Raises:
        ValueError: If ``kind`` is ``TinyFormat.DETECT``.
        NamespaceError: If ``namespace`` is not declared by ``table``.
        MissingDescriptorError: If an emitted member has no descriptor.
        OSError: If writing to ``stream`` fails.
    """
    target = namespace if namespace is not None else table.target_namespace
    table.require_namespace(target)
    if kind is TinyFormat.TINY:
        lines = render_v1(table, target, from_label, to_label, config)
    elif kind is TinyFormat.TINY_2:
        lines = render_v2(table, target, from_label, to_label, config)
    else:
        raise ValueError(f"Cannot encode format {kind.value!r}")

    stream.write("".join(lines))
    logger.debug(
        "Encoded mapping table (format=%s namespace=%s records=%d)",
        kind.value,
        target,
        len(lines) - 1,
    )
    return len(lines) - 1


def render_v2(
    table: MappingTable,
    target: str,
    from_label: str,
    to_label: str,
    config: EncoderConfig = DEFAULT_CONFIG,
) -> list[str]:
    """Render hierarchical v2 lines.

    Classes are emitted when anything in their subtree carries a name in
    ``target``. A class or method emitted only for its children writes an
    empty destination column, which decodes back to an absent name.
    Inner classes follow their outer class's members as full-name ``c``
    lines.
    """
    lines = [f"tiny\t2\t0\t{from_label}\t{to_label}\n"]
    for klass in _sorted_classes(table.top_level_classes(), target, config):
        _render_v2_class(lines, klass, target, config)
    return lines


def _render_v2_class(
    lines: list[str], klass: ClassEntry, target: str, config: EncoderConfig
) -> None:
    lines.append(f"c\t{klass.source_name}\t{klass.name(target) or ''}\n")

    methods = [method for method in klass.methods.values() if method.has_mappings(target)]
    for method in sorted(methods, key=config.method_key):
        lines.append(
            f"\tm\t{_require_descriptor(method)}\t{method.source_name}"
            f"\t{method.name(target) or ''}\n"
        )
        params = [param for param in method.parameters.values() if param.has_name(target)]
        for param in sorted(params, key=lambda entry: entry.position):
            lines.append(f"\t\tp\t{param.position}\t\t{param.name(target)}\n")

    fields = [entry for entry in klass.fields.values() if entry.has_name(target)]
    for entry in sorted(fields, key=config.field_key):
        lines.append(
            f"\tf\t{_require_descriptor(entry)}\t{entry.source_name}"
            f"\t{entry.name(target)}\n"
        )

    for inner in _sorted_classes(klass.inner_classes.values(), target, config):
        _render_v2_class(lines, inner, target, config)


def render_v1(
    table: MappingTable,
    target: str,
    from_label: str,
    to_label: str,
    config: EncoderConfig = DEFAULT_CONFIG,
) -> list[str]:
    """Render flat v1 lines.

    Only entries with a name in ``target`` are emitted: classes first, then
    every field of the table, then every method, each group sorted
    globally by owner and member key.
    """
    lines = [f"v1\t{from_label}\t{to_label}\n"]
    classes = [klass for klass in table.classes.values() if klass.has_name(target)]
    for klass in sorted(classes, key=config.class_key):
        lines.append(f"CLASS\t{klass.source_name}\t{klass.name(target)}\n")

    fields = [
        entry
        for klass in table.classes.values()
        for entry in klass.fields.values()
        if entry.has_name(target)
    ]
    for entry in sorted(
        fields, key=lambda item: (config.class_key(item.owner), config.field_key(item))
    ):
        lines.append(_v1_member_line("FIELD", entry, target))

    methods = [
        entry
        for klass in table.classes.values()
        for entry in klass.methods.values()
        if entry.has_name(target)
    ]
    for entry in sorted(
        methods, key=lambda item: (config.class_key(item.owner), config.method_key(item))
    ):
        lines.append(_v1_member_line("METHOD", entry, target))
    return lines


def _v1_member_line(tag: str, entry: MemberEntry, target: str) -> str:
    return (
        f"{tag}\t{entry.owner.source_name}\t{_require_descriptor(entry)}"
        f"\t{entry.source_name}\t{entry.name(target)}\n"
    )


def _sorted_classes(
    classes: Iterable[ClassEntry], target: str, config: EncoderConfig
) -> list[ClassEntry]:
    return sorted(
        (klass for klass in classes if klass.has_mappings(target)), key=config.class_key
    )


def _require_descriptor(entry: MemberEntry) -> str:
    if entry.descriptor is None:
        raise MissingDescriptorError(entry.owner.source_name, entry.source_name)
    return entry.descriptor
