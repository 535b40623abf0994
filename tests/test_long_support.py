import struct

import pytest

from s7device.long_support import read, select_data_type, write
from s7device.plc_address import PlcDataType, UnsupportedDataTypeError


@pytest.mark.parametrize(
    "data_type, value",
    [
        (PlcDataType.INT8, -100),
        (PlcDataType.UINT8, 250),
        (PlcDataType.INT16, -20000),
        (PlcDataType.UINT16, 65000),
        (PlcDataType.INT32, -2000000000),
    ],
)
def test_read_values(data_type, value):
    assert read(struct.pack(data_type.struct_format, value), data_type) == value


def test_read_bool():
    assert read(bytes([1]), PlcDataType.BOOL) == 1
    assert read(bytes([0]), PlcDataType.BOOL) == 0


@pytest.mark.parametrize("data_type", [PlcDataType.UINT32, PlcDataType.FLOAT])
def test_read_unsupported(data_type):
    with pytest.raises(UnsupportedDataTypeError):
        read(bytes(4), data_type)


@pytest.mark.parametrize("data_type", [PlcDataType.UINT32, PlcDataType.FLOAT])
def test_write_unsupported(data_type):
    with pytest.raises(UnsupportedDataTypeError):
        write(1, data_type)


@pytest.mark.parametrize(
    "data_type, value",
    [
        (PlcDataType.INT8, 12),
        (PlcDataType.UINT8, 200),
        (PlcDataType.INT16, -4000),
        (PlcDataType.UINT16, 50000),
        (PlcDataType.INT32, 987654),
    ],
)
def test_write_read_round_trip(data_type, value):
    data = write(value, data_type)
    assert len(data) == data_type.size
    assert read(data, data_type) == value


def test_write_bool_normalises():
    assert write(-9, PlcDataType.BOOL) == bytes([1])
    assert write(0, PlcDataType.BOOL) == bytes([0])


def test_write_truncates():
    data = write(70000, PlcDataType.INT16)
    assert read(data, PlcDataType.INT16) == PlcDataType.INT16.wrap(70000)


def test_select_data_type():
    assert select_data_type(PlcDataType.INT8, PlcDataType.INT32) is PlcDataType.INT8
    assert select_data_type(None, PlcDataType.UINT16) is PlcDataType.UINT16
    assert select_data_type(PlcDataType.FLOAT, None) is None
    assert select_data_type(PlcDataType.UINT32, PlcDataType.INT16) is None
    assert select_data_type(None, PlcDataType.FLOAT) is PlcDataType.INT32
    assert select_data_type(None, PlcDataType.UINT32) is PlcDataType.INT32
    assert select_data_type(None, None) is None