# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Error types raised by mapping codecs and joins."""

from collections.abc import Iterable


class MappingError(RuntimeError):
    """Base error for mapping table operations."""


class FormatError(MappingError):
    """Represent a structurally invalid header or record line."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        """Initialize error.

        Args:
            message: Failure description.
            line_number: 1-based input line, ``None`` when not line-bound.
        """
        prefix = f"line {line_number}: " if line_number is not None else ""
        super().__init__(f"{prefix}{message}")
        self.line_number = line_number


class NamespaceError(MappingError):
    """Represent a namespace missing from a table or stream header."""

    def __init__(self, namespace: str, available: Iterable[str]) -> None:
        self.namespace = namespace
        self.available = tuple(available)
        super().__init__(
            f"Namespace not found: {namespace} (available={', '.join(self.available)})"
        )


class MissingDescriptorError(MappingError):
    """Represent a member that cannot be encoded without a descriptor."""

    def __init__(self, owner: str, name: str) -> None:
        super().__init__(f"Member has no descriptor: {owner}.{name}")
        self.owner = owner
        self.name = name
