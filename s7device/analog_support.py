"""Value conversion shared by analog (ai/ao) records."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import MutableMapping

from s7device.plc_address import (
    PlcAddress,
    PlcDataType,
    UnsupportedDataTypeError,
    data_size_in_bits,
)

__all__ = [
    "AnalogReading",
    "DeviceLimits",
    "read",
    "write",
    "select_data_type",
    "extract_device_limits",
    "default_device_limits",
    "conversion_factors",
]

_UNSIGNED_TYPES = frozenset(
    {PlcDataType.BOOL, PlcDataType.UINT8, PlcDataType.UINT16, PlcDataType.UINT32}
)
_SIGNED_TYPES = frozenset({PlcDataType.INT8, PlcDataType.INT16, PlcDataType.INT32})

_FLOAT_PREFIX = re.compile(
    r"\s*[+-]?(?:inf(?:inity)?|nan|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class AnalogReading:
    """Result of reading an analog value.

    Integer PLC types fill ``raw``; the float type fills ``value`` directly.
    """

    raw: int | None = None
    value: float | None = None


@dataclass(frozen=True)
class DeviceLimits:
    """Raw device values that correspond to EGUL and EGUF."""

    low: float
    high: float


def read(buffer: bytes, data_type: PlcDataType) -> AnalogReading:
    """Decode an analog value from ``buffer`` (host byte order)."""
    if data_type is PlcDataType.UINT32:
        raise UnsupportedDataTypeError("analog records do not support uint32")
    decoded = data_type.unpack(buffer)
    if data_type is PlcDataType.FLOAT:
        return AnalogReading(value=float(decoded))
    return AnalogReading(raw=int(decoded))


def write(raw: int, value: float, data_type: PlcDataType) -> bytes:
    """Encode an analog record value; the float type uses ``value``, others ``raw``."""
    if data_type is PlcDataType.UINT32:
        raise UnsupportedDataTypeError("analog records do not support uint32")
    if data_type is PlcDataType.BOOL:
        return data_type.pack(1 if raw != 0 else 0)
    if data_type is PlcDataType.FLOAT:
        return data_type.pack(value)
    return data_type.pack(raw)


def select_data_type(
    requested: PlcDataType | None, default: PlcDataType | None
) -> PlcDataType | None:
    """Pick the PLC data type; a requested uint32 is refused, a default one becomes int32."""
    data_type = requested if requested is not None else default
    if data_type is PlcDataType.UINT32:
        return None if requested is not None else PlcDataType.INT32
    return data_type


def _strtod(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        return 0.0
    return float(match.group(0))


def extract_device_limits(
    parameters: MutableMapping[str, str | None],
) -> DeviceLimits | None:
    """Take the DLV and DHV parameters out of ``parameters``.

    Returns None when neither is given. Raises ValueError when only one is
    given or one has no value; the parameters are then left in place.
    """
    has_low = "DLV" in parameters
    has_high = "DHV" in parameters
    if not has_low and not has_high:
        return None
    if not has_high:
        raise ValueError("parameter DLV is specified but parameter DHV is missing")
    if not has_low:
        raise ValueError("parameter DHV is specified but parameter DLV is missing")
    low_text = parameters["DLV"]
    high_text = parameters["DHV"]
    if not low_text:
        raise ValueError("parameter DLV has no value")
    if not high_text:
        raise ValueError("parameter DHV has no value")
    del parameters["DLV"]
    del parameters["DHV"]
    return DeviceLimits(_strtod(low_text), _strtod(high_text))


def default_device_limits(
    address: PlcAddress, data_type: PlcDataType
) -> DeviceLimits | None:
    """Return the full raw range of the address's data size, or None for floats."""
    bits = data_size_in_bits(address.data_size)
    if data_type in _UNSIGNED_TYPES:
        return DeviceLimits(0.0, float((1 << bits) - 1))
    if data_type in _SIGNED_TYPES:
        return DeviceLimits(float(-(1 << (bits - 1))), float((1 << (bits - 1)) - 1))
    return None


def conversion_factors(
    eguf: float, egul: float, low: float, high: float
) -> tuple[float, float] | None:
    """Return (ESLO, EOFF) mapping ``low`` to EGUL and ``high`` to EGUF.

    Returns None when the limits are equal and no conversion is possible.
    """
    if low == high:
        return None
    span = high - low
    eslo = (eguf - egul) / span
    eoff = (high * egul - low * eguf) / span
    return eslo, eoff