"""Buffer interfaces and the operation object that streams bytes to and from buffers."""

from __future__ import annotations

import abc
from typing import Any

from devdriver.fieldset import Access


class UnexpectedEofError(EOFError):
    """Raised when a buffer ran out of data before the requested amount was read."""


class BufferInterface(abc.ABC):
    """Interface to a device that exposes byte buffers."""

    @abc.abstractmethod
    def write(self, address: Any, buf: bytes) -> int:
        """Write some of ``buf`` to the buffer at ``address``; return the count written."""

    @abc.abstractmethod
    def flush(self, address: Any) -> None:
        """Flush the buffer at ``address``."""

    @abc.abstractmethod
    def read(self, address: Any, size: int) -> bytes:
        """Read at most ``size`` bytes from the buffer at ``address``."""


class AsyncBufferInterface(abc.ABC):
    """Asynchronous interface to a device that exposes byte buffers."""

    @abc.abstractmethod
    async def write(self, address: Any, buf: bytes) -> int:
        """Write some of ``buf`` to the buffer at ``address``; return the count written."""

    @abc.abstractmethod
    async def flush(self, address: Any) -> None:
        """Flush the buffer at ``address``."""

    @abc.abstractmethod
    async def read(self, address: Any, size: int) -> bytes:
        """Read at most ``size`` bytes from the buffer at ``address``."""


class BufferOperation:
    """Reads from and writes to one buffer of a device."""

    def __init__(
        self,
        interface: BufferInterface | AsyncBufferInterface,
        address: Any,
        access: Access = Access.RW,
    ) -> None:
        self._interface = interface
        self._address = address
        self._access = access

    @property
    def address(self) -> Any:
        """The address this operation acts on."""
        return self._address

    def _require_write(self) -> None:
        if not self._access.writable():
            raise PermissionError(
                f"buffer at {self._address!r} with access {self._access.value} "
                "cannot be written"
            )

    def _require_read(self) -> None:
        if not self._access.readable():
            raise PermissionError(
                f"buffer at {self._address!r} with access {self._access.value} "
                "cannot be read"
            )

    @staticmethod
    def _checked_chunk(data: bytes, size: int) -> bytes:
        chunk = bytes(data)
        if len(chunk) > size:
            raise ValueError(
                f"interface returned {len(chunk)} bytes when at most {size} were asked"
            )
        return chunk

    def write(self, buf: bytes) -> int:
        """Write some of ``buf`` and return how many bytes were written."""
        self._require_write()
        return self._interface.write(self._address, bytes(buf))

    def write_all(self, buf: bytes) -> None:
        """Write all of ``buf``, calling :meth:`write` until everything is sent."""
        view = memoryview(bytes(buf))
        while view:
            written = self.write(view)
            if written == 0:
                raise RuntimeError("write() returned 0")
            view = view[written:]

    def flush(self) -> None:
        """Flush the buffer."""
        self._require_write()
        self._interface.flush(self._address)

    def read(self, size: int) -> bytes:
        """Read at most ``size`` bytes."""
        self._require_read()
        return self._checked_chunk(self._interface.read(self._address, size), size)

    def read_exact(self, size: int) -> bytes:
        """Read exactly ``size`` bytes, raising :class:`UnexpectedEofError` if short."""
        collected = bytearray()
        while len(collected) < size:
            chunk = self.read(size - len(collected))
            if not chunk:
                break
            collected += chunk
        if len(collected) < size:
            raise UnexpectedEofError(
                f"expected {size} bytes but the buffer ended after {len(collected)}"
            )
        return bytes(collected)

    async def write_async(self, buf: bytes) -> int:
        """Asynchronously write some of ``buf``; return how many bytes were written."""
        self._require_write()
        return await self._interface.write(self._address, bytes(buf))

    async def write_all_async(self, buf: bytes) -> None:
        """Asynchronously write all of ``buf``."""
        view = memoryview(bytes(buf))
        while view:
            written = await self.write_async(view)
            if written == 0:
                raise RuntimeError("write() returned 0")
            view = view[written:]

    async def flush_async(self) -> None:
        """Asynchronously flush the buffer."""
        self._require_write()
        await self._interface.flush(self._address)

    async def read_async(self, size: int) -> bytes:
        """Asynchronously read at most ``size`` bytes."""
        self._require_read()
        data = await self._interface.read(self._address, size)
        return self._checked_chunk(data, size)

    async def read_exact_async(self, size: int) -> bytes:
        """Asynchronously read exactly ``size`` bytes."""
        collected = bytearray()
        while len(collected) < size:
            chunk = await self.read_async(size - len(collected))
            if not chunk:
                break
            collected += chunk
        if len(collected) < size:
            raise UnexpectedEofError(
                f"expected {size} bytes but the buffer ended after {len(collected)}"
            )
        return bytes(collected)