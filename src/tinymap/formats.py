# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Closed set of tiny wire format kinds."""

from enum import Enum

from tinymap.errors import FormatError

V1_HEADER = "v1"
V2_HEADER = ("tiny", "2")


class TinyFormat(Enum):
    """Tiny format variants.

    ``DETECT`` is only meaningful for decoding; it picks ``TINY`` or
    ``TINY_2`` from the header line.
    """

    TINY = "tiny"
    TINY_2 = "tiny2"
    DETECT = "detect"


def detect_format(header: str) -> TinyFormat:
    """Choose the format variant from a header line.

    Args:
        header: First line of a mapping stream.

    Returns:
        ``TinyFormat.TINY`` or ``TinyFormat.TINY_2``.

    Raises:
        FormatError: If the header matches neither variant.
    """
    columns = header.rstrip("\r\n").split("\t")
    if columns[0] == V1_HEADER:
        return TinyFormat.TINY
    if tuple(columns[:2]) == V2_HEADER:
        return TinyFormat.TINY_2
    raise FormatError(f"Unrecognized mapping header: {columns[0]!r}", line_number=1)
