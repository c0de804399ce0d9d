# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Read and write tiny mapping files."""

import logging
from pathlib import Path

from tinymap.decoder import decode
from tinymap.encoder import DEFAULT_CONFIG, EncoderConfig, encode
from tinymap.formats import TinyFormat
from tinymap.model import MappingTable

logger = logging.getLogger(__name__)


def read_mappings(
    path: Path,
    kind: TinyFormat = TinyFormat.DETECT,
    from_ns: str | None = None,
    to_ns: str | None = None,
) -> MappingTable:
    """Decode a mapping file.

    Args:
        path: Mapping file path.
        kind: Format variant; detected from the header by default.
        from_ns: Optional namespace read as obfuscated names.
        to_ns: Optional namespace read as deobfuscated names.

    Returns:
        Decoded table.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not valid UTF-8.
        FormatError: If the content is malformed.
        NamespaceError: If a role namespace is missing.
    """
    with path.open("r", encoding="utf-8", newline="") as stream:
        table = decode(stream, kind, from_ns=from_ns, to_ns=to_ns)
    logger.debug("Read mapping file (path=%s classes=%d)", path, len(table))
    return table


def write_mappings(
    table: MappingTable,
    path: Path,
    kind: TinyFormat,
    from_label: str,
    to_label: str,
    namespace: str | None = None,
    config: EncoderConfig = DEFAULT_CONFIG,
) -> int:
    """Encode a table into ``path`` through a temporary sibling file.

    The target is only replaced once the whole table was written, so a
    failure never leaves a half-written mapping file behind.

    Args:
        table: Table to encode.
        path: Destination file path.
        kind: ``TinyFormat.TINY`` or ``TinyFormat.TINY_2``.
        from_label: Header label of the obfuscated column.
        to_label: Header label of the deobfuscated column.
        namespace: Destination namespace to write.
        config: Record ordering.

    Returns:
        Number of record lines written.

    Raises:
        OSError: If writing or replacing the file fails.
        MissingDescriptorError: If an emitted member has no descriptor.
    """
    tmp_path = path.with_suffix(f"{path.suffix}.tmp")
    try:
        with tmp_path.open("w", encoding="utf-8", newline="\n") as stream:
            records = encode(
                table,
                stream,
                kind,
                from_label,
                to_label,
                namespace=namespace,
                config=config,
            )
        tmp_path.replace(path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    logger.debug("Wrote mapping file (path=%s records=%d)", path, records)
    return records
