# devdriver

Building blocks for device drivers that talk to hardware through registers,
commands and buffers, along with a unified value tree for JSON, YAML and TOML
device manifests.

You bring an interface object that knows how to move bytes to and from your
device (over SPI, I2C, a serial link, a simulator and so on). `devdriver`
gives you bit-accurate field access and read, write and modify operations on
top of it.

## Installation

```
pip install devdriver
```

## Bit-level field access

`devdriver.ops` reads and writes unsigned integers at arbitrary bit ranges
inside a byte buffer, in least- or most-significant-bit-first order and in
little or big endian byte order (`ByteOrder.LE`, `ByteOrder.BE`):

```python
from devdriver.ops import ByteOrder, load_lsb0, store_lsb0

data = bytearray(3)
store_lsb0(12345, 1, 16, data, ByteOrder.LE)
assert load_lsb0(data, 1, 16, ByteOrder.LE) == 12345
```

`load_msb0` and `store_msb0` do the same with most-significant-bit-first
numbering. A bit range that does not fit in the buffer raises `ValueError`.
`ByteOrder.byte_index(data_len, bit_index)` gives the byte that holds a bit.

## Field sets

`devdriver.fieldset.FieldSet` wraps the raw bytes of a register or command
payload. Subclass it and set `SIZE_BITS`; the constructor takes exactly enough
bytes for that many bits and raises `ValueError` otherwise.
`new_with_zero()` creates an all-zero instance, the `buffer()` method returns
the mutable backing `bytearray`, and `&`, `|`, `^` and `~` work bitwise across
whole field sets of the same class. Equality compares class and bytes.

Field accessors are yours to write, usually on top of `devdriver.ops`:

```python
from devdriver.fieldset import FieldSet
from devdriver.ops import load_lsb0, store_lsb0

class Foo(FieldSet):
    SIZE_BITS = 24

    @property
    def value(self) -> int:
        return load_lsb0(self.buffer(), 1, 16)

    @value.setter
    def value(self, v: int) -> None:
        store_lsb0(v, 1, 16, self.buffer())
```

`ConversionError(source, target)` is an exception for field conversions that
fail; its message reads "Could not convert value from `source` to type
`target`".

`Access` (`WO`, `RO`, `RW`, `RC`, `CO`) describes a register or buffer;
`readable()` is true for `RO` and `RW`, `writable()` for `WO` and `RW`.

## Registers

Implement `devdriver.register.RegisterInterface` (or
`AsyncRegisterInterface`) with `write_register(address, size_bits, data)` and
`read_register(address, size_bits)`, the latter returning the register's
bytes, then drive it through a `RegisterOperation`:

```python
from devdriver.fieldset import Access
from devdriver.register import RegisterOperation

op = RegisterOperation(interface, 0, Foo, Foo.new_with_zero, Access.RW)
op.write(lambda reg: setattr(reg, "value", 12345))  # starts from the reset value
op.write_with_zero(lambda reg: ...)                  # starts from all zeros
reg = op.read()
op.modify(lambda reg: ...)                           # read, change, write back
```

The callback's return value is passed back to the caller. When no reset
constructor is given, the reset value is all zeros. Each call has an `_async`
counterpart (`write_async`, `write_with_zero_async`, `read_async`,
`modify_async`) for asynchronous interfaces. An operation that the register's
`Access` does not permit raises `PermissionError` before the device is
touched.

## Commands

Implement `devdriver.command.CommandInterface` (or `AsyncCommandInterface`)
with `dispatch_command(address, size_bits_in, input, size_bits_out)`,
returning the response bytes. `CommandOperation(interface, address,
in_field_set, out_field_set)` takes the input and output field set classes,
either of which may be `None`.

`dispatch(f)` creates a zeroed input field set, lets `f` fill it in, sends it
and returns the output field set built from the response, or `None` when the
command has no output. Passing `f` to a command without input raises
`TypeError`. `dispatch_async` does the same for asynchronous interfaces.

## Buffers

Implement `devdriver.buffer.BufferInterface` (or `AsyncBufferInterface`) with
`write(address, buf)` returning the count written, `flush(address)` and
`read(address, size)` returning at most `size` bytes. `BufferOperation(
interface, address, access)` offers:

- `write`, `flush` and `read`, passed through to the interface;
- `write_all`, which calls `write` until everything is sent and raises
  `RuntimeError` if a write returns 0;
- `read_exact`, which raises `UnexpectedEofError` (an `EOFError`) when the
  device runs out of data early.

An interface that returns more bytes than asked raises `ValueError`. Every
method has an `_async` counterpart, and access is checked as for registers.

## Manifest values

`devdriver.manifest_tree` gives JSON, YAML and TOML documents one common
interface:

```python
from devdriver.manifest_tree import parse_manifest

root = parse_manifest('{"size_bits": 24}', "json")
size = root.as_map().get("size_bits").as_uint()
```

`parse_manifest(source, kind)` takes `"json"`, `"yaml"`, `"toml"` or one of
the classes `JsonValue`, `YamlValue`, `TomlValue`; an unknown name raises
`ValueError`. Values offer `type_name()`, `as_null`, `as_bool`, `as_uint`,
`as_int`, `as_float`, `as_string`, `as_array` and `as_map`; the last returns a
`ValueMap` with `items()`, `get()`, `in`, iteration and `len()` in document
order. When a value has a different type, the accessor raises
`ManifestValueError` naming the expected and actual type.

Format details:

- JSON integers can also be read with `as_float`.
- YAML uses core-schema booleans and integers (`0x` and `0o` prefixes), and
  strings of the form `0b1010` are accepted by `as_uint` and `as_int`. Only
  the first document of a stream is used.
- TOML has no null, so `TomlValue.as_null` always raises.

## What it does not do

`devdriver` does not turn a manifest into a device: it does not generate
`FieldSet` subclasses, field accessors, enums or device objects from a JSON,
YAML or TOML description, and it has no command-line tool. The manifest value
tree reads the documents; building field sets and operations from them is up
to you.

## Running the tests

```
pip install "devdriver[test]"
pytest
```