"""Value conversion shared by binary (bi/bo) records."""

from __future__ import annotations

import math

from s7device.plc_address import PlcDataType

__all__ = ["read", "write", "select_data_type"]


def read(buffer: bytes, data_type: PlcDataType) -> int:
    """Return 1 if the value in ``buffer`` counts as set, else 0."""
    value = data_type.unpack(buffer)
    if data_type is PlcDataType.FLOAT:
        # Infinities read as cleared; NaN compares unequal to zero and reads as set.
        return 1 if value != 0.0 and not math.isinf(value) else 0
    return 1 if value != 0 else 0


def write(rval: int, data_type: PlcDataType) -> bytes:
    """Encode a binary record value as 1 or 0 of the given PLC data type."""
    bit = 1 if rval != 0 else 0
    if data_type is PlcDataType.FLOAT:
        return data_type.pack(float(bit))
    return data_type.pack(bit)


def select_data_type(
    requested: PlcDataType | None, default: PlcDataType | None
) -> PlcDataType | None:
    """Pick the PLC data type: every type is supported, the request wins."""
    return requested if requested is not None else default