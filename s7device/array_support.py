"""Conversion between PLC buffers and the elements of array (aai/aao/waveform) records."""

from __future__ import annotations

import math
import struct
from typing import Iterable

from s7device.array_types import STRING_SIZE, FieldType
from s7device.plc_address import PlcDataType

__all__ = ["required_buffer_size", "read_array", "write_array"]

_TRUE_TEXT = "TRUE"
_FALSE_TEXT = "FALSE"
_TEXT_ENCODING = "latin-1"

Element = int | float | str


def required_buffer_size(count: int, data_type: PlcDataType) -> int:
    """Return the bytes a buffer needs for ``count`` elements of ``data_type``.

    Bools are packed eight to a byte.
    """
    if count < 0:
        raise ValueError("element count must not be negative")
    if data_type is PlcDataType.BOOL:
        return (count + 7) // 8
    return count * data_type.size


def _integral(value: int | float) -> int:
    """Truncate towards zero as a C conversion does; non-finite values become 0."""
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return math.trunc(value)
    return int(value)


def _coerce_to_field(value: int | float, field_type: FieldType) -> int | float:
    """Convert a number to what an element of ``field_type`` can hold."""
    if field_type is FieldType.DOUBLE:
        return float(value)
    if field_type is FieldType.FLOAT:
        return struct.unpack("=f", struct.pack("=f", float(value)))[0]
    fmt = field_type.struct_format
    bits = struct.calcsize(fmt) * 8
    result = _integral(value) & ((1 << bits) - 1)
    if fmt[-1].islower() and result >= 1 << (bits - 1):
        result -= 1 << bits
    return result


def _check_buffer(buffer: bytes, needed: int) -> None:
    if len(buffer) < needed:
        raise ValueError(f"buffer holds {len(buffer)} bytes but {needed} are needed")


def _bits(buffer: bytes, count: int) -> Iterable[int]:
    for index in range(count):
        yield (buffer[index // 8] >> (index % 8)) & 1


def _decode_string(chunk: bytes) -> str:
    # The last byte of each element is always the terminator.
    return chunk[: STRING_SIZE - 1].split(b"\0", 1)[0].decode(_TEXT_ENCODING)


def _encode_string(value: str | bytes) -> bytes:
    raw = value if isinstance(value, bytes) else str(value).encode(_TEXT_ENCODING)
    return raw[: STRING_SIZE - 1].ljust(STRING_SIZE, b"\0")


def read_array(
    buffer: bytes, count: int, field_type: FieldType, data_type: PlcDataType
) -> list[Element]:
    """Decode ``count`` elements of ``data_type`` from ``buffer`` as ``field_type`` values.

    Bool buffers read as 0/1, or as "TRUE"/"FALSE" for string fields. String
    fields take STRING_SIZE bytes per element from a byte-typed buffer.
    Raises ValueError if the buffer is too small.
    """
    buffer = bytes(buffer)
    _check_buffer(buffer, required_buffer_size(count, data_type))

    if data_type is PlcDataType.BOOL:
        if field_type is FieldType.STRING:
            return [_TRUE_TEXT if bit else _FALSE_TEXT for bit in _bits(buffer, count)]
        return [_coerce_to_field(bit, field_type) for bit in _bits(buffer, count)]

    if field_type is FieldType.STRING:
        _check_buffer(buffer, count * STRING_SIZE)
        return [
            _decode_string(buffer[offset : offset + STRING_SIZE])
            for offset in range(0, count * STRING_SIZE, STRING_SIZE)
        ]

    data = buffer[: count * data_type.size]
    return [
        _coerce_to_field(value, field_type)
        for (value,) in struct.iter_unpack(data_type.struct_format, data)
    ]


def _is_set(value: Element, field_type: FieldType) -> bool:
    if field_type is FieldType.STRING:
        text = value.decode(_TEXT_ENCODING) if isinstance(value, bytes) else str(value)
        return text.strip().upper() in ("1", _TRUE_TEXT)
    return _coerce_to_field(value, field_type) != 0


def write_array(
    values: Iterable[Element], field_type: FieldType, data_type: PlcDataType
) -> bytes:
    """Encode the elements of an array record as a buffer of ``data_type``.

    For a bool buffer, string elements count as set when they read "1" or
    "TRUE" (ignoring case and surrounding blanks), numbers when non-zero.
    String fields are written as STRING_SIZE bytes per element, terminated.
    """
    values = list(values)

    if data_type is PlcDataType.BOOL:
        packed = bytearray(required_buffer_size(len(values), data_type))
        for index, value in enumerate(values):
            if _is_set(value, field_type):
                packed[index // 8] |= 1 << (index % 8)
        return bytes(packed)

    if field_type is FieldType.STRING:
        return b"".join(_encode_string(value) for value in values)

    return b"".join(
        data_type.pack(
            _coerce_to_field(value, field_type)
            if data_type is PlcDataType.FLOAT
            else _integral(_coerce_to_field(value, field_type))
        )
        for value in values
    )