"""Bit-level loading and storing of integers inside byte buffers."""

from __future__ import annotations

import enum
from collections.abc import Iterator, MutableSequence, Sequence


class ByteOrder(enum.Enum):
    """Byte order used to map bit indices onto bytes."""

    LE = "LE"
    BE = "BE"

    def byte_index(self, data_len: int, bit_index: int) -> int:
        """The index of the byte holding ``bit_index`` for this byte order."""
        if self is ByteOrder.LE:
            return bit_index // 8
        return data_len - bit_index // 8 - 1


def _check_range(data_len: int, start: int, end: int) -> None:
    if not 0 <= start <= end <= data_len * 8:
        raise ValueError(
            f"bit range {start}..{end} does not fit in {data_len} bytes"
        )


def _steps(start: int, end: int) -> Iterator[tuple[int, bool]]:
    """Yield each bit index to visit and whether a whole byte is handled there."""
    i = start
    while i < end:
        if i % 8 == 0 and i + 8 <= end:
            yield i, True
            i += 8
        else:
            yield i, False
            i += 1


def _next_multiple_of_8(n: int) -> int:
    return (n + 7) // 8 * 8


def _pivot_msb0(start: int, end: int, i: int) -> int:
    # Bits in a partial byte are reversed around the middle of the partial run,
    # so the value still comes out in natural order.
    if i // 8 == start // 8:
        num_bits = min(_next_multiple_of_8(start + 1), end) - start
        pivot = start + num_bits // 2
    else:
        num_bits = end - _next_multiple_of_8(end - 8)
        pivot = end - (num_bits + 1) // 2

    even = 1 if num_bits % 2 == 0 else 0
    diff = pivot - i
    if diff <= 0:
        diff -= even

    j = i + diff * 2
    if diff > 0:
        j -= even
    else:
        j += even
    return j


def load_lsb0(
    data: Sequence[int], start: int, end: int, byte_order: ByteOrder = ByteOrder.LE
) -> int:
    """Load the unsigned integer held in bits ``start..end`` using lsb0 bit order."""
    n = len(data)
    _check_range(n, start, end)
    output = 0
    for i, whole in _steps(start, end):
        byte = data[byte_order.byte_index(n, i)]
        if whole:
            output |= byte << (i - start)
        else:
            output |= ((byte >> (i % 8)) & 1) << (i - start)
    return output


def store_lsb0(
    value: int,
    start: int,
    end: int,
    data: MutableSequence[int],
    byte_order: ByteOrder = ByteOrder.LE,
) -> None:
    """Store ``value`` into bits ``start..end`` of ``data`` using lsb0 bit order."""
    n = len(data)
    _check_range(n, start, end)
    for i, whole in _steps(start, end):
        idx = byte_order.byte_index(n, i)
        if whole:
            data[idx] = (value >> (i - start)) & 0xFF
        else:
            bit = (value >> (i - start)) & 1
            shift = i % 8
            data[idx] = (data[idx] & ~(1 << shift) & 0xFF) | (bit << shift)


def load_msb0(
    data: Sequence[int], start: int, end: int, byte_order: ByteOrder = ByteOrder.LE
) -> int:
    """Load the unsigned integer held in bits ``start..end`` using msb0 bit order."""
    n = len(data)
    _check_range(n, start, end)
    output = 0
    for i, whole in _steps(start, end):
        byte = data[byte_order.byte_index(n, i)]
        if whole:
            output |= byte << (i - start)
        else:
            j = _pivot_msb0(start, end, i)
            bit = (byte >> (7 - i % 8)) & 1
            output |= bit << (j - start)
    return output


def store_msb0(
    value: int,
    start: int,
    end: int,
    data: MutableSequence[int],
    byte_order: ByteOrder = ByteOrder.LE,
) -> None:
    """Store ``value`` into bits ``start..end`` of ``data`` using msb0 bit order."""
    n = len(data)
    _check_range(n, start, end)
    for i, whole in _steps(start, end):
        idx = byte_order.byte_index(n, i)
        if whole:
            data[idx] = (value >> (i - start)) & 0xFF
        else:
            j = _pivot_msb0(start, end, i)
            bit = (value >> (j - start)) & 1
            shift = 7 - i % 8
            data[idx] = (data[idx] & ~(1 << shift) & 0xFF) | (bit << shift)