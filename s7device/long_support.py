"""Value conversion shared by long integer (longin/longout) records."""

from __future__ import annotations

from s7device.plc_address import PlcDataType, UnsupportedDataTypeError

__all__ = ["read", "write", "select_data_type"]

_UNSUPPORTED = frozenset({PlcDataType.UINT32, PlcDataType.FLOAT})


def _check(data_type: PlcDataType) -> None:
    if data_type in _UNSUPPORTED:
        raise UnsupportedDataTypeError(
            f"long records do not support {data_type.value}"
        )


def read(buffer: bytes, data_type: PlcDataType) -> int:
    """Decode an integer value from ``buffer`` (host byte order)."""
    _check(data_type)
    return int(data_type.unpack(buffer))


def write(value: int, data_type: PlcDataType) -> bytes:
    """Encode a long record value; bools become 1 or 0, others are truncated."""
    _check(data_type)
    if data_type is PlcDataType.BOOL:
        return data_type.pack(1 if value != 0 else 0)
    return data_type.pack(value)


def select_data_type(
    requested: PlcDataType | None, default: PlcDataType | None
) -> PlcDataType | None:
    """Pick the PLC data type; requested uint32/float are refused, defaults become int32."""
    data_type = requested if requested is not None else default
    if data_type in _UNSUPPORTED:
        return None if requested is not None else PlcDataType.INT32
    return data_type