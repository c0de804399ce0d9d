# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for tiny mapping tables."""

from tinymap.decoder import decode
from tinymap.encoder import EncoderConfig, encode
from tinymap.errors import FormatError, MappingError, MissingDescriptorError, NamespaceError
from tinymap.files import read_mappings, write_mappings
from tinymap.formats import TinyFormat, detect_format
from tinymap.index import NamespaceIndex
from tinymap.joiner import join, migrate, project
from tinymap.model import (
    ClassEntry,
    FieldEntry,
    MappingTable,
    MethodEntry,
    ParameterEntry,
)

__all__ = [
    "ClassEntry",
    "EncoderConfig",
    "FieldEntry",
    "FormatError",
    "MappingError",
    "MappingTable",
    "MethodEntry",
    "MissingDescriptorError",
    "NamespaceError",
    "NamespaceIndex",
    "ParameterEntry",
    "TinyFormat",
    "decode",
    "detect_format",
    "encode",
    "join",
    "migrate",
    "project",
    "read_mappings",
    "write_mappings",
]
