import pytest

from devdriver.fieldset import Access, FieldSet
from devdriver.ops import ByteOrder, load_lsb0, store_lsb0
from devdriver.register import (
    AsyncRegisterInterface,
    RegisterInterface,
    RegisterOperation,
)


class Foo(FieldSet):
    SIZE_BITS = 24

    @property
    def value0(self):
        return bool(load_lsb0(self.buffer(), 0, 1, ByteOrder.LE))

    @value0.setter
    def value0(self, v):
        store_lsb0(int(v), 0, 1, self.buffer(), ByteOrder.LE)

    @property
    def value1(self):
        return load_lsb0(self.buffer(), 1, 16, ByteOrder.LE)

    @value1.setter
    def value1(self, v):
        store_lsb0(v, 1, 16, self.buffer(), ByteOrder.LE)

    @property
    def value2(self):
        raw = load_lsb0(self.buffer(), 16, 24, ByteOrder.LE)
        return raw - 0x100 if raw & 0x80 else raw

    @value2.setter
    def value2(self, v):
        store_lsb0(v & 0xFF, 16, 24, self.buffer(), ByteOrder.LE)


class Val(FieldSet):
    SIZE_BITS = 24

    @property
    def val(self):
        raw = load_lsb0(self.buffer(), 0, 24, ByteOrder.LE)
        return raw - (1 << 24) if raw & (1 << 23) else raw

    @val.setter
    def val(self, v):
        store_lsb0(v & 0xFFFFFF, 0, 24, self.buffer(), ByteOrder.LE)


def _val_with(value):
    def make():
        fs = Val.new_with_zero()
        fs.val = value
        return fs

    return make


class MemoryInterface(RegisterInterface):
    def __init__(self):
        self.device_memory = bytearray(128)
        self.sizes = []

    def write_register(self, address, size_bits, data):
        self.sizes.append(size_bits)
        self.device_memory[address : address + len(data)] = data

    def read_register(self, address, size_bits):
        self.sizes.append(size_bits)
        n = (size_bits + 7) // 8
        return bytes(self.device_memory[address : address + n])


class AsyncMemoryInterface(AsyncRegisterInterface):
    def __init__(self):
        self.device_memory = bytearray(16)

    async def write_register(self, address, size_bits, data):
        self.device_memory[address : address + len(data)] = data

    async def read_register(self, address, size_bits):
        n = (size_bits + 7) // 8
        return bytes(self.device_memory[address : address + n])


def _set_v1(reg):
    reg.value1 = 12345


def _set_v0_v2(reg):
    reg.value0 = True
    reg.value2 = -1


def _set_all(reg):
    reg.value0 = True
    reg.value1 = 12345
    reg.value2 = -1


EXPECTED = bytes([(0x39 << 1) + 1, 0x30 << 1, 0xFF])


def test_basic_read_modify_write():
    iface = MemoryInterface()
    foo = RegisterOperation(iface, 0, Foo)

    foo.write(_set_v1)
    reg = foo.read()
    assert reg.value0 is False
    assert reg.value1 == 12345
    assert reg.value2 == 0

    foo.modify(_set_v0_v2)
    reg = foo.read()
    assert reg.value0 is True
    assert reg.value1 == 12345
    assert reg.value2 == -1

    assert bytes(iface.device_memory[0:3]) == EXPECTED
    assert set(iface.sizes) == {24}


def test_repeated_read_modify_write():
    iface = MemoryInterface()
    # FooRepeated: address 3, stride 3, index 2
    RegisterOperation(iface, 3 + 2 * 3, Foo).modify(_set_all)
    assert bytes(iface.device_memory[9:12]) == EXPECTED


def test_block_read_modify_write():
    iface = MemoryInterface()
    # Block offset 10, stride 20, index 1, register address 0
    foo = RegisterOperation(iface, 10 + 1 * 20 + 0, Foo)
    foo.write(_set_v1)
    foo.modify(_set_v0_v2)
    reg = foo.read()
    assert (reg.value0, reg.value1, reg.value2) == (True, 12345, -1)
    assert bytes(iface.device_memory[30:33]) == EXPECTED
    assert bytes(iface.device_memory[0:30]) == bytes(30)


def test_callback_return_value_is_passed_on():
    iface = MemoryInterface()
    foo = RegisterOperation(iface, 0, Foo)
    assert foo.write(lambda reg: "done") == "done"
    assert foo.modify(lambda reg: 7) == 7


def test_ref_uses_own_address():
    iface = MemoryInterface()
    foo = RegisterOperation(iface, 0, Val, _val_with(1))
    foo_ref = RegisterOperation(iface, 3, Val, _val_with(2))

    def set123(reg):
        reg.val = 123

    foo.write(set123)
    assert foo_ref.read().val == 0
    assert foo.read().val == 123


def test_refs_have_same_type():
    iface = MemoryInterface()
    foo = RegisterOperation(iface, 0, Val, _val_with(1)).read()
    foo_ref = RegisterOperation(iface, 3, Val, _val_with(2)).read()
    assert type(foo) is type(foo_ref) is Val


def test_refs_have_own_reset_value():
    iface = MemoryInterface()
    foo = RegisterOperation(iface, 0, Val, _val_with(1))
    foo_ref = RegisterOperation(iface, 3, Val, _val_with(2))

    foo.write(lambda _: None)
    foo_ref.write(lambda _: None)

    assert foo.read().val == 1
    assert foo_ref.read().val == 2


def test_write_with_zero_ignores_reset_value():
    iface = MemoryInterface()
    iface.device_memory[0:3] = b"\xaa\xbb\xcc"
    foo = RegisterOperation(iface, 0, Val, _val_with(5))
    foo.write_with_zero(lambda _: None)
    assert bytes(iface.device_memory[0:3]) == b"\x00\x00\x00"


def test_read_only_register_rejects_write():
    iface = MemoryInterface()
    op = RegisterOperation(iface, 0, Foo, access=Access.RO)
    with pytest.raises(PermissionError):
        op.write(_set_v1)
    with pytest.raises(PermissionError):
        op.modify(_set_v1)
    assert op.read().value1 == 0


def test_write_only_register_rejects_read():
    iface = MemoryInterface()
    op = RegisterOperation(iface, 0, Foo, access=Access.WO)
    op.write(_set_v1)
    assert bytes(iface.device_memory[0:2]) == b"\x72\x60"
    with pytest.raises(PermissionError):
        op.read()


def test_wrong_read_length_is_an_error():
    class ShortInterface(MemoryInterface):
        def read_register(self, address, size_bits):
            return b"\x00"

    with pytest.raises(ValueError):
        RegisterOperation(ShortInterface(), 0, Foo).read()


@pytest.mark.asyncio
async def test_async_read_modify_write():
    iface = AsyncMemoryInterface()
    foo = RegisterOperation(iface, 0, Foo)

    await foo.write_async(_set_v1)
    reg = await foo.read_async()
    assert (reg.value0, reg.value1, reg.value2) == (False, 12345, 0)

    await foo.modify_async(_set_v0_v2)
    reg = await foo.read_async()
    assert (reg.value0, reg.value1, reg.value2) == (True, 12345, -1)
    assert bytes(iface.device_memory[0:3]) == EXPECTED


@pytest.mark.asyncio
async def test_async_write_with_zero_and_reset():
    iface = AsyncMemoryInterface()
    op = RegisterOperation(iface, 2, Val, _val_with(2))
    await op.write_async(lambda _: None)
    assert (await op.read_async()).val == 2
    await op.write_with_zero_async(lambda _: None)
    assert (await op.read_async()).val == 0