"""Register interfaces and the operation object that reads and writes registers."""

from __future__ import annotations

import abc
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from devdriver.fieldset import Access, FieldSet

F = TypeVar("F", bound=FieldSet)
R = TypeVar("R")


class RegisterInterface(abc.ABC):
    """Interface to a device that exposes registers."""

    @abc.abstractmethod
    def write_register(self, address: Any, size_bits: int, data: bytes) -> None:
        """Write ``data`` to the register located at ``address``."""

    @abc.abstractmethod
    def read_register(self, address: Any, size_bits: int) -> bytes:
        """Read the register located at ``address`` and return its bytes."""


class AsyncRegisterInterface(abc.ABC):
    """Asynchronous interface to a device that exposes registers."""

    @abc.abstractmethod
    async def write_register(self, address: Any, size_bits: int, data: bytes) -> None:
        """Write ``data`` to the register located at ``address``."""

    @abc.abstractmethod
    async def read_register(self, address: Any, size_bits: int) -> bytes:
        """Read the register located at ``address`` and return its bytes."""


class RegisterOperation(Generic[F]):
    """Performs reads and writes on one register of a device."""

    def __init__(
        self,
        interface: RegisterInterface | AsyncRegisterInterface,
        address: Any,
        field_set: type[F],
        new_with_reset: Callable[[], F] | None = None,
        access: Access = Access.RW,
    ) -> None:
        self._interface = interface
        self._address = address
        self._field_set = field_set
        self._new_with_reset = new_with_reset or field_set.new_with_zero
        self._access = access

    @property
    def address(self) -> Any:
        """The address this operation acts on."""
        return self._address

    def _require_write(self) -> None:
        if not self._access.writable():
            raise PermissionError(
                f"register at {self._address!r} with access {self._access.value} "
                "cannot be written"
            )

    def _require_read(self) -> None:
        if not self._access.readable():
            raise PermissionError(
                f"register at {self._address!r} with access {self._access.value} "
                "cannot be read"
            )

    def _require_modify(self) -> None:
        self._require_read()
        self._require_write()

    def _size_bits(self) -> int:
        return self._field_set.SIZE_BITS

    def write(self, f: Callable[[F], R]) -> R:
        """Write the register, starting from its reset value.

        ``f`` receives the field set to change; its return value is passed on.
        """
        self._require_write()
        register = self._new_with_reset()
        returned = f(register)
        self._interface.write_register(
            self._address, self._size_bits(), bytes(register.buffer())
        )
        return returned

    def write_with_zero(self, f: Callable[[F], R]) -> R:
        """Write the register, starting from all zeros."""
        self._require_write()
        register = self._field_set.new_with_zero()
        returned = f(register)
        self._interface.write_register(
            self._address, self._size_bits(), bytes(register.buffer())
        )
        return returned

    def read(self) -> F:
        """Read the register from the device."""
        self._require_read()
        data = self._interface.read_register(self._address, self._size_bits())
        return self._field_set(data)

    def modify(self, f: Callable[[F], R]) -> R:
        """Read the register, let ``f`` change it, then write it back."""
        self._require_modify()
        register = self.read()
        returned = f(register)
        self._interface.write_register(
            self._address, self._size_bits(), bytes(register.buffer())
        )
        return returned

    async def write_async(self, f: Callable[[F], R]) -> R:
        """Asynchronously write the register, starting from its reset value."""
        self._require_write()
        register = self._new_with_reset()
        returned = f(register)
        await self._interface.write_register(
            self._address, self._size_bits(), bytes(register.buffer())
        )
        return returned

    async def write_with_zero_async(self, f: Callable[[F], R]) -> R:
        """Asynchronously write the register, starting from all zeros."""
        self._require_write()
        register = self._field_set.new_with_zero()
        returned = f(register)
        await self._interface.write_register(
            self._address, self._size_bits(), bytes(register.buffer())
        )
        return returned

    async def read_async(self) -> F:
        """Asynchronously read the register from the device."""
        self._require_read()
        data = await self._interface.read_register(self._address, self._size_bits())
        return self._field_set(data)

    async def modify_async(self, f: Callable[[F], R]) -> R:
        """Asynchronously read, change and write back the register."""
        self._require_modify()
        register = await self.read_async()
        returned = f(register)
        await self._interface.write_register(
            self._address, self._size_bits(), bytes(register.buffer())
        )
        return returned