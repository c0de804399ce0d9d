# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Decode tiny v1 and v2 text into mapping tables.

Both formats carry one name column per header namespace. An empty name
column means "no rename" and is stored as an absent name.
"""

import logging
import re
from collections.abc import Iterable, Iterator

from tinymap.errors import FormatError
from tinymap.formats import V1_HEADER, V2_HEADER, TinyFormat, detect_format
from tinymap.joiner import project
from tinymap.model import ClassEntry, MappingTable, MethodEntry, MemberEntry, NamedEntry

logger = logging.getLogger(__name__)

_ESCAPE_SEQUENCE = re.compile(r"\\(.?)")
_ESCAPES: dict[str, str] = {"\\": "\\", "n": "\n", "r": "\r", "t": "\t", "0": "\0"}
_RECORD_TAGS = frozenset({"c", "m", "f", "p", "v"})


def decode(
    stream: Iterable[str],
    kind: TinyFormat,
    from_ns: str | None = None,
    to_ns: str | None = None,
) -> MappingTable:
    """Decode a tiny mapping stream.

    Without role namespaces the full multi-namespace table is returned.
    When ``from_ns`` or ``to_ns`` is given the table is projected to a
    translation table; an omitted role defaults to the header's source or
    first destination namespace.

    Args:
        stream: Text lines, for example an open text file.
        kind: Format variant, or ``TinyFormat.DETECT``.
        from_ns: Namespace read as obfuscated names.
        to_ns: Namespace read as deobfuscated names.

    Returns:
        Decoded table.

    Raises:
        FormatError: If the header or any record line is malformed.
        NamespaceError: If a role namespace is missing from the header.
    """
    lines = iter(stream)
    header = next(lines, None)
    if header is None:
        raise FormatError("Mapping stream is empty")
    if kind is TinyFormat.DETECT:
        kind = detect_format(header)

    if kind is TinyFormat.TINY:
        table = _new_table(_v1_namespaces(header))
    else:
        table = _new_table(_v2_namespaces(header))

    roles: tuple[str, str] | None = None
    if from_ns is not None or to_ns is not None:
        roles = (
            from_ns if from_ns is not None else table.source_namespace,
            to_ns if to_ns is not None else table.target_namespace,
        )
        table.require_namespace(roles[0])
        table.require_namespace(roles[1])

    if kind is TinyFormat.TINY:
        _decode_v1_body(table, lines)
    else:
        _TinyV2Decoder(table).decode(lines)

    logger.info(
        "Decoded mapping table (format=%s namespaces=%s classes=%d)",
        kind.value,
        ",".join(table.namespaces),
        len(table),
    )
    if roles is not None:
        return project(table, *roles)
    return table


def _new_table(namespaces: list[str]) -> MappingTable:
    try:
        return MappingTable(namespaces)
    except ValueError as exc:
        raise FormatError(str(exc), line_number=1) from exc


def _v1_namespaces(header: str) -> list[str]:
    columns = _split(header)
    if columns[0] != V1_HEADER:
        raise FormatError(
            f"Expected {V1_HEADER!r} header, got {columns[0]!r}", line_number=1
        )
    if len(columns) < 3:
        raise FormatError("Header must declare at least two namespaces", line_number=1)
    return columns[1:]


def _v2_namespaces(header: str) -> list[str]:
    columns = _split(header)
    if tuple(columns[:2]) != V2_HEADER:
        raise FormatError(f"Expected 'tiny\\t2' header, got {columns[0]!r}", line_number=1)
    if len(columns) < 5:
        raise FormatError("Header must declare at least two namespaces", line_number=1)
    if not columns[2].isdigit():
        raise FormatError(f"Invalid minor version: {columns[2]!r}", line_number=1)
    return columns[3:]


def _decode_v1_body(table: MappingTable, lines: Iterator[str]) -> None:
    """Decode flat ``CLASS``/``FIELD``/``METHOD`` records."""
    namespace_count = len(table.namespaces)
    for line_number, raw in enumerate(lines, start=2):
        line = raw.rstrip("\r\n")
        if not line or line.startswith("#"):
            continue
        columns = _split(line)
        tag = columns[0]
        if tag == "CLASS":
            _expect_columns(columns, 1 + namespace_count, line_number)
            klass = table.create_or_get_class(_source_name(columns[1], line_number))
            _apply_names(klass, table.namespaces, columns[1:])
        elif tag in ("FIELD", "METHOD"):
            _expect_columns(columns, 3 + namespace_count, line_number)
            owner = table.create_or_get_class(_source_name(columns[1], line_number))
            name = _source_name(columns[3], line_number)
            if tag == "FIELD":
                member: MemberEntry = owner.create_or_get_field(name, columns[2])
            else:
                member = owner.create_or_get_method(name, columns[2])
            _apply_names(member, table.namespaces, columns[3:])
        else:
            raise FormatError(f"Unknown record tag: {tag!r}", line_number=line_number)


class _TinyV2Decoder:
    """Decode indentation-nested v2 records into one table."""

    def __init__(self, table: MappingTable) -> None:
        self._table = table
        self._namespaces = table.namespaces
        self._escaped_names = False
        self._in_header = True
        self._class: ClassEntry | None = None
        self._member: MemberEntry | None = None

    def decode(self, lines: Iterator[str]) -> None:
        for line_number, raw in enumerate(lines, start=2):
            line = raw.rstrip("\r\n")
            if not line.strip():
                continue
            body = line.lstrip("\t")
            depth = len(line) - len(body)
            columns = _split(body)
            if depth == 0:
                self._in_header = False
                self._decode_class(columns, line_number)
            elif depth == 1 and self._in_header and _is_property(columns):
                self._decode_property(columns)
            elif depth == 1:
                self._decode_member(columns, line_number)
            elif depth == 2:
                self._decode_member_child(columns, line_number)
            elif depth == 3 and columns[0] == "c":
                continue
            else:
                raise FormatError(f"Unexpected indentation depth {depth}", line_number)

    def _decode_property(self, columns: list[str]) -> None:
        logger.debug(
            "Read header property (key=%s value=%s)",
            columns[0],
            columns[1] if len(columns) > 1 else None,
        )
        if columns[0] == "escaped-names":
            self._escaped_names = True

    def _decode_class(self, columns: list[str], line_number: int) -> None:
        if columns[0] != "c":
            raise FormatError(f"Unknown record tag: {columns[0]!r}", line_number)
        _expect_columns(columns, 1 + len(self._namespaces), line_number)
        names = self._names(columns[1:], line_number)
        klass = self._table.create_or_get_class(_source_name(names[0], line_number))
        _apply_names(klass, self._namespaces, names)
        self._class = klass
        self._member = None

    def _decode_member(self, columns: list[str], line_number: int) -> None:
        if self._class is None:
            raise FormatError("Member outside of a class", line_number)
        tag = columns[0]
        if tag == "c":
            self._member = None
            return
        if tag not in ("m", "f"):
            raise FormatError(f"Unknown record tag: {tag!r}", line_number)
        _expect_columns(columns, 2 + len(self._namespaces), line_number)
        descriptor = self._unescape(columns[1], line_number)
        names = self._names(columns[2:], line_number)
        name = _source_name(names[0], line_number)
        if tag == "m":
            member: MemberEntry = self._class.create_or_get_method(name, descriptor)
        else:
            member = self._class.create_or_get_field(name, descriptor)
        _apply_names(member, self._namespaces, names)
        self._member = member

    def _decode_member_child(self, columns: list[str], line_number: int) -> None:
        if self._member is None:
            raise FormatError("Record outside of a member", line_number)
        tag = columns[0]
        if tag == "c":
            return
        if not isinstance(self._member, MethodEntry) or tag not in ("p", "v"):
            raise FormatError(f"Unknown record tag: {tag!r}", line_number)
        if tag == "v":
            return
        _expect_columns(columns, 2 + len(self._namespaces), line_number)
        try:
            position = int(columns[1])
            parameter = self._member.create_or_get_parameter(position)
        except ValueError as exc:
            raise FormatError(
                f"Invalid parameter index: {columns[1]!r}", line_number
            ) from exc
        names = self._names(columns[2:], line_number)
        parameter.set_name(self._namespaces[0], names[0] or None)
        _apply_names(parameter, self._namespaces, names)

    def _names(self, columns: list[str], line_number: int) -> list[str]:
        return [self._unescape(column, line_number) for column in columns]

    def _unescape(self, text: str, line_number: int) -> str:
        if not self._escaped_names or "\\" not in text:
            return text

        def _replace(match: re.Match[str]) -> str:
            escaped = _ESCAPES.get(match.group(1))
            if escaped is None:
                raise FormatError(f"Invalid escape sequence in {text!r}", line_number)
            return escaped

        return _ESCAPE_SEQUENCE.sub(_replace, text)


def _split(line: str) -> list[str]:
    return line.rstrip("\r\n").split("\t")


def _is_property(columns: list[str]) -> bool:
    """Header properties are ``key`` or ``key<TAB>value`` lines, never record tags."""
    return len(columns) <= 2 and columns[0] not in _RECORD_TAGS


def _expect_columns(columns: list[str], expected: int, line_number: int) -> None:
    if len(columns) != expected:
        raise FormatError(
            f"Expected {expected} columns for {columns[0]!r}, got {len(columns)}",
            line_number,
        )


def _source_name(name: str, line_number: int) -> str:
    if not name:
        raise FormatError("Missing source-namespace name", line_number)
    return name


def _apply_names(entry: NamedEntry, namespaces: tuple[str, ...], names: list[str]) -> None:
    """Set destination-namespace names; ``names[0]`` is the source column."""
    for namespace, name in zip(namespaces[1:], names[1:]):
        entry.set_name(namespace, name or None)
