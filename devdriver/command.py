"""Command interfaces and the operation object that dispatches commands."""

from __future__ import annotations

import abc
from collections.abc import Callable
from typing import Any

from devdriver.fieldset import FieldSet


class CommandInterface(abc.ABC):
    """Interface to a device that accepts commands."""

    @abc.abstractmethod
    def dispatch_command(
        self, address: Any, size_bits_in: int, input: bytes, size_bits_out: int
    ) -> bytes:
        """Send a command and return the response bytes.

        ``input`` is empty and ``size_bits_in`` zero when the command has no
        input; the response must be empty when ``size_bits_out`` is zero.
        """


class AsyncCommandInterface(abc.ABC):
    """Asynchronous interface to a device that accepts commands."""

    @abc.abstractmethod
    async def dispatch_command(
        self, address: Any, size_bits_in: int, input: bytes, size_bits_out: int
    ) -> bytes:
        """Send a command and return the response bytes."""


class CommandOperation:
    """Dispatches one command, with optional input and output field sets."""

    def __init__(
        self,
        interface: CommandInterface | AsyncCommandInterface,
        address: Any,
        in_field_set: type[FieldSet] | None = None,
        out_field_set: type[FieldSet] | None = None,
    ) -> None:
        self._interface = interface
        self._address = address
        self._in = in_field_set
        self._out = out_field_set

    def _prepare(
        self, f: Callable[[FieldSet], Any] | None
    ) -> tuple[int, bytes, int]:
        if self._in is None:
            if f is not None:
                raise TypeError("this command has no input fields to fill in")
            size_in, payload = 0, b""
        else:
            in_fields = self._in.new_with_zero()
            if f is not None:
                f(in_fields)
            size_in, payload = self._in.SIZE_BITS, bytes(in_fields.buffer())
        size_out = 0 if self._out is None else self._out.SIZE_BITS
        return size_in, payload, size_out

    def _finish(self, response: bytes | None) -> FieldSet | None:
        if self._out is None:
            return None
        return self._out(response if response is not None else b"")

    def dispatch(self, f: Callable[[FieldSet], Any] | None = None) -> FieldSet | None:
        """Dispatch the command.

        ``f`` fills in the input fields, which start at zero. The output field
        set is returned, or ``None`` when the command has no output.
        """
        size_in, payload, size_out = self._prepare(f)
        response = self._interface.dispatch_command(
            self._address, size_in, payload, size_out
        )
        return self._finish(response)

    async def dispatch_async(
        self, f: Callable[[FieldSet], Any] | None = None
    ) -> FieldSet | None:
        """Dispatch the command asynchronously."""
        size_in, payload, size_out = self._prepare(f)
        response = await self._interface.dispatch_command(
            self._address, size_in, payload, size_out
        )
        return self._finish(response)