# s7device

Building blocks for Siemens S7 PLC device support in Python. The package
parses PLC memory addresses and converts raw PLC data to and from record
values. Its poll groups gather the reads of many requesters into one batch
and run that batch at a fixed interval.

## Installation

```
pip install .
```

To run the tests, install the test extra and run pytest:

```
pip install ".[test]"
pytest
```

## PLC addresses

`s7device.plc_address.PlcAddress.parse` reads the usual S7 notation and
returns an immutable address:

```python
from s7device.plc_address import PlcAddress, PlcArea, PlcDataSize

addr = PlcAddress.parse("DB1.DBW4")
assert addr.area is PlcArea.DB
assert addr.area_number == 1
assert addr.data_size is PlcDataSize.WORD
assert addr.start_byte == 4
assert str(addr) == "DB1.DBW4"

bit = PlcAddress.parse("I0.2")
assert bit.data_size is PlcDataSize.BIT and bit.start_bit == 2
```

The area letters are:

- `I` or `E` for inputs
- `Q` or `A` for outputs
- `F` or `M` for flags
- `DB` for data blocks
- `T` for timers
- `C` or `Z` for counters

Case does not matter. Timers and counters take a bare number and are always
words. Inside a data block, a bit address uses `X`, as in `DB2.DBX3.1`.

An invalid address raises `PlcAddressError`, which is a subclass of
`ValueError`. `PlcAddress.create(area, area_number, data_size, start_byte,
start_bit)` builds an address from its parts and checks them the same way.

The module also has these helpers:

- `area_to_string` and `string_to_area`
- `data_size_to_string` and `string_to_data_size`
- `data_size_in_bits`

`PlcDataType` lists the value types: bool, int8, uint8, int16, uint16, int32,
uint32 and float. Each member has `size`, `pack` and `unpack`. Buffers always
use host byte order.

## Value conversion

Each record family has its own module. Every one of them has a
`select_data_type(requested, default)` function. It returns the PLC data type
the record will use. If the requested type cannot be used, it returns `None`.
If the default type does not suit the record, it may return a substitute.
Reading or writing with a data type the record does not support raises
`UnsupportedDataTypeError`.

- `s7device.binary_support`
  - `read(buffer, data_type)` returns 1 or 0.
  - `write(rval, data_type)` encodes 1 or 0.
  - Every data type is supported.
- `s7device.long_support`
  - `read(buffer, data_type)` and `write(value, data_type)`.
  - uint32 and float are not supported. A default of either becomes int32.
- `s7device.analog_support`
  - `read(buffer, data_type)` returns an `AnalogReading`. It has `raw` set for
    integer types and `value` set for float.
  - `write(raw, value, data_type)` encodes `value` for float and `raw` for
    every other type.
  - uint32 is not supported.
  - `extract_device_limits(parameters)` takes `DLV`/`DHV` out of a parameter
    mapping and returns a `DeviceLimits`. It returns `None` if neither is
    given, and raises `ValueError` if only one is given or one is empty.
  - `default_device_limits(address, data_type)` returns the full raw range of
    the address's data size.
  - `conversion_factors(eguf, egul, low, high)` returns `(eslo, eoff)`.
- `s7device.multibinary_support`
  - `init_mask(mask, nobt, shft, data_size)` returns the new `(mask, nobt)`.
  - `read(buffer, mask, data_type)` decodes the value as unsigned and applies
    a non-zero mask.
  - `write_mbbo(val, rval, mask, state_values, data_type)` encodes an mbbo
    record value.
  - `write_mbbo_direct(val, rval, mask, data_type)` encodes an mbboDirect
    record value.
  - bool and float are not supported.
- `s7device.array_types`
  - `FieldType` lists the element types of array records.
  - `data_type_for_input(address, suggestion, field_type)` and
    `data_type_for_output(address, suggestion, field_type)` pick the PLC data
    type an array record uses.
- `s7device.array_support`
  - `required_buffer_size(count, data_type)` gives the buffer size in bytes.
    Bools are packed eight to a byte.
  - `read_array(buffer, count, field_type, data_type)` decodes the elements.
  - `write_array(values, field_type, data_type)` encodes them.
  - String elements take 40 bytes each (`array_types.STRING_SIZE`).

```python
from s7device import long_support
from s7device.plc_address import PlcDataType

buf = long_support.write(-2, PlcDataType.INT16)
assert long_support.read(buf, PlcDataType.INT16) == -2
```

## Poll groups

A poll group collects the reads that its registered requesters queue. It
passes all of them, as one list of `ReadItem` objects, to a reader that you
supply. The reader fills in each item's `data`, and clears `ok` if that item
failed.

Each requester then gets one `process_response(succeeded, buffer)` call per
read it queued, in the order it queued them. A read succeeds when `ok` is set
and `data` has exactly the requested size. If the reader raises, every read in
the batch is reported as failed.

```python
from s7device.plc_address import PlcAddress
from s7device.poll_group import PollGroupRegistry, PollRequester

class Temperature(PollRequester):
    def prepare_request(self, service):
        service.request_read(PlcAddress.parse("DB1.DBD0"), 4)

    def process_response(self, succeeded, buffer):
        print(succeeded, buffer)

def my_reader(items):
    for item in items:
        item.data = bytes(item.size)  # fetch the bytes from the PLC here

registry = PollGroupRegistry()
group = registry.create("plc1", "fast", 0.5, my_reader)
group.register_requester(Temperature())
registry.start_all()
...
registry.stop_all()
```

Each group polls in its own background thread. The first cycle runs one
interval after `start()`.

- `PollGroup.process()` runs a single cycle at once.
- `PollGroupRegistry.create` raises `ValueError` for a duplicate group name on
  the same port.
- `PollGroupRegistry.find` returns the named group or `None`.
- `configure_poll_group` and `start_poll_groups` do the same through a
  registry shared by the whole process. There, a non-positive priority means
  `DEFAULT_PRIORITY`.

The priority is only stored on the group. It does not change how the thread
is scheduled.

## Timing helpers

`s7device.ticks` provides:

- `get_tick()`, a monotonic millisecond counter that wraps at 32 bits
- `sys_sleep(delay_ms)`, a sleep measured in milliseconds
- `delta_time(start)`, the milliseconds elapsed since a tick

## What this package does not do

The package does not speak the S7 network protocol and opens no connection to
a PLC. Poll groups read through the reader callable you pass them. It is also
not tied to any control-system framework. The conversion functions work on
plain bytes and numbers, and you apply their results to your own records.