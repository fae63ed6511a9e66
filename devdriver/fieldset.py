"""Field set containers, conversion errors and access capabilities."""

from __future__ import annotations

import enum
from typing import Any, Callable, ClassVar, Self


class FieldSet:
    """A fixed-size bit container that backs a register or command payload.

    Subclasses set ``SIZE_BITS``. The backing buffer always holds exactly
    enough bytes to contain that many bits.
    """

    SIZE_BITS: ClassVar[int] = 0

    __slots__ = ("_data",)

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        buf = bytearray(data)
        expected = self._byte_len()
        if len(buf) != expected:
            raise ValueError(
                f"{type(self).__name__} needs {expected} bytes, got {len(buf)}"
            )
        self._data = buf

    @classmethod
    def _byte_len(cls) -> int:
        return (cls.SIZE_BITS + 7) // 8

    @classmethod
    def new_with_zero(cls) -> Self:
        """Create an instance with every bit cleared."""
        return cls(bytes(cls._byte_len()))

    def buffer(self) -> bytearray:
        """The mutable backing bytes of this field set."""
        return self._data

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldSet):
            return NotImplemented
        return type(self) is type(other) and self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def _combine(self, other: Any, op: Callable[[int, int], int]) -> Self:
        if type(other) is not type(self):
            return NotImplemented
        return type(self)(bytes(op(a, b) for a, b in zip(self._data, other._data)))

    def __and__(self, other: Any) -> Self:
        return self._combine(other, lambda a, b: a & b)

    def __or__(self, other: Any) -> Self:
        return self._combine(other, lambda a, b: a | b)

    def __xor__(self, other: Any) -> Self:
        return self._combine(other, lambda a, b: a ^ b)

    def __invert__(self) -> Self:
        return type(self)(bytes(~b & 0xFF for b in self._data))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(0x{self._data.hex()})"


class ConversionError(Exception):
    """Raised when a raw value cannot be converted to a target type."""

    def __init__(self, source: Any, target: str) -> None:
        super().__init__(source, target)
        self.source = source
        self.target = target

    def __str__(self) -> str:
        return (
            f"Could not convert value from `{self.source}` to type `{self.target}`"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConversionError):
            return NotImplemented
        return (self.source, self.target) == (other.source, other.target)

    def __hash__(self) -> int:
        return hash((self.source, self.target))


class Access(enum.Enum):
    """Access specifier of a register, field or buffer."""

    WO = "WO"
    RO = "RO"
    RW = "RW"
    RC = "RC"
    CO = "CO"

    def readable(self) -> bool:
        """Whether reading is permitted."""
        return self in (Access.RO, Access.RW)

    def writable(self) -> bool:
        """Whether writing is permitted."""
        return self in (Access.WO, Access.RW)