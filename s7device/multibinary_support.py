"""Value conversion shared by multi-bit binary (mbbi/mbbo/mbbiDirect/mbboDirect) records."""

from __future__ import annotations

from typing import Iterable

from s7device.plc_address import (
    PlcDataSize,
    PlcDataType,
    UnsupportedDataTypeError,
    data_size_in_bits,
)

__all__ = [
    "init_mask",
    "read",
    "write_mbbo",
    "write_mbbo_direct",
    "select_data_type",
]

_UINT32_MASK = 0xFFFFFFFF

# Only the bits matter, so every integer type is handled as its unsigned counterpart.
_UNSIGNED_VIEW = {
    PlcDataType.INT8: PlcDataType.UINT8,
    PlcDataType.UINT8: PlcDataType.UINT8,
    PlcDataType.INT16: PlcDataType.UINT16,
    PlcDataType.UINT16: PlcDataType.UINT16,
    PlcDataType.INT32: PlcDataType.UINT32,
    PlcDataType.UINT32: PlcDataType.UINT32,
}


def _unsigned_view(data_type: PlcDataType) -> PlcDataType:
    try:
        return _UNSIGNED_VIEW[data_type]
    except KeyError:
        raise UnsupportedDataTypeError(
            f"multi-bit binary records do not support {data_type.value}"
        ) from None


def init_mask(
    mask: int, nobt: int, shft: int, data_size: PlcDataSize
) -> tuple[int, int]:
    """Adjust a record's MASK and NOBT to the PLC data size.

    If NOBT exceeds the number of bits of ``data_size``, both MASK and NOBT
    become zero. A positive SHFT then shifts MASK towards the higher bits.
    Returns the new ``(mask, nobt)``.
    """
    if nobt > data_size_in_bits(data_size):
        nobt = 0
        mask = 0
    if shft > 0:
        mask = (mask << shft) & _UINT32_MASK
    return mask, nobt


def read(buffer: bytes, mask: int, data_type: PlcDataType) -> int:
    """Decode the raw value from ``buffer`` as unsigned, applying a non-zero mask."""
    rval = int(_unsigned_view(data_type).unpack(buffer))
    if mask != 0:
        rval &= mask
    return rval


def _write_common(rval: int, data_type: PlcDataType) -> bytes:
    return _unsigned_view(data_type).pack(rval & _UINT32_MASK)


def write_mbbo(
    val: int,
    rval: int,
    mask: int,
    state_values: Iterable[int],
    data_type: PlcDataType,
) -> bytes:
    """Encode an mbbo record value.

    VAL is written unless at least one state value is defined, in which case
    RVAL is written, restricted by a non-zero mask.
    """
    value = val
    if any(state != 0 for state in state_values):
        value = rval
        if mask != 0:
            value &= mask
    return _write_common(value, data_type)


def write_mbbo_direct(val: int, rval: int, mask: int, data_type: PlcDataType) -> bytes:
    """Encode an mbboDirect record value: RVAL, or VAL restricted by a non-zero mask."""
    value = rval
    if mask != 0:
        value = val & mask
    return _write_common(value, data_type)


def select_data_type(
    requested: PlcDataType | None, default: PlcDataType | None
) -> PlcDataType | None:
    """Pick the PLC data type.

    Bool is never supported. A requested float is refused; a default float
    becomes uint32, which has the same length.
    """
    data_type = requested if requested is not None else default
    if data_type is PlcDataType.BOOL:
        return None
    if data_type is PlcDataType.FLOAT:
        return None if requested is not None else PlcDataType.UINT32
    return data_type