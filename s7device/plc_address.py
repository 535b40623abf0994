"""PLC memory addresses, data sizes and data types."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import Enum

__all__ = [
    "PlcArea",
    "PlcDataSize",
    "PlcDataType",
    "PlcAddressError",
    "UnsupportedDataTypeError",
    "PlcAddress",
    "area_to_string",
    "string_to_area",
    "data_size_to_string",
    "string_to_data_size",
    "data_size_in_bits",
]

_DIGITS = frozenset("0123456789")


class PlcAddressError(ValueError):
    """Raised when a PLC address is malformed or inconsistent."""


class UnsupportedDataTypeError(ValueError):
    """Raised when a PLC data type cannot be used for an operation."""


class PlcArea(Enum):
    """Memory area of a PLC."""

    DB = "db"
    FLAGS = "flags"
    INPUTS = "inputs"
    OUTPUTS = "outputs"
    TIMER = "timer"
    COUNTER = "counter"


class PlcDataSize(Enum):
    """Size of the element a PLC address refers to."""

    BIT = "bit"
    BYTE = "byte"
    WORD = "word"
    DWORD = "dword"


_TYPE_FORMATS = {
    "bool": "=B",
    "int8": "=b",
    "uint8": "=B",
    "int16": "=h",
    "uint16": "=H",
    "int32": "=i",
    "uint32": "=I",
    "float": "=f",
}


class PlcDataType(Enum):
    """Data type of a value stored in PLC memory.

    Buffers hold values in host byte order.
    """

    BOOL = "bool"
    INT8 = "int8"
    UINT8 = "uint8"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    FLOAT = "float"

    @property
    def struct_format(self) -> str:
        return _TYPE_FORMATS[self.value]

    @property
    def size(self) -> int:
        """Number of bytes one value occupies in a buffer."""
        return struct.calcsize(self.struct_format)

    @property
    def is_signed(self) -> bool:
        return self in (PlcDataType.INT8, PlcDataType.INT16, PlcDataType.INT32)

    def unpack(self, buffer: bytes) -> int | float:
        """Decode the first value of this type from ``buffer``."""
        if len(buffer) < self.size:
            raise ValueError(
                f"buffer of {len(buffer)} bytes is too small for {self.value}"
            )
        return struct.unpack_from(self.struct_format, buffer)[0]

    def wrap(self, value: int) -> int:
        """Reduce an integer to the range of this type, as a C conversion would."""
        bits = self.size * 8
        result = int(value) & ((1 << bits) - 1)
        if self.is_signed and result >= 1 << (bits - 1):
            result -= 1 << bits
        return result

    def pack(self, value: int | float) -> bytes:
        """Encode ``value`` as this type; integers are truncated to fit."""
        if self is PlcDataType.FLOAT:
            return struct.pack(self.struct_format, float(value))
        return struct.pack(self.struct_format, self.wrap(value))


_AREA_NAMES = {
    PlcArea.DB: "DB",
    PlcArea.FLAGS: "F",
    PlcArea.INPUTS: "I",
    PlcArea.OUTPUTS: "Q",
    PlcArea.TIMER: "T",
    PlcArea.COUNTER: "C",
}

_AREA_ALIASES = {
    "F": PlcArea.FLAGS,
    "M": PlcArea.FLAGS,
    "I": PlcArea.INPUTS,
    "E": PlcArea.INPUTS,
    "Q": PlcArea.OUTPUTS,
    "A": PlcArea.OUTPUTS,
    "T": PlcArea.TIMER,
    "C": PlcArea.COUNTER,
    "Z": PlcArea.COUNTER,
    "DB": PlcArea.DB,
}

_SIZE_NAMES = {
    PlcDataSize.BYTE: "B",
    PlcDataSize.WORD: "W",
    PlcDataSize.DWORD: "D",
}

_SIZE_LETTERS = {name: size for size, name in _SIZE_NAMES.items()}

_SIZE_BITS = {
    PlcDataSize.BIT: 1,
    PlcDataSize.BYTE: 8,
    PlcDataSize.WORD: 16,
    PlcDataSize.DWORD: 32,
}


def area_to_string(area: PlcArea) -> str:
    """Return the short name of an area, e.g. "I", "Q" or "DB"."""
    return _AREA_NAMES.get(area, "")


def string_to_area(text: str) -> PlcArea | None:
    """Return the area named by ``text`` (case-insensitive) or None."""
    return _AREA_ALIASES.get(text.upper())


def data_size_to_string(data_size: PlcDataSize, is_db: bool) -> str:
    """Return the prefix letter for a data size; bits use "X" only inside a DB."""
    if data_size is PlcDataSize.BIT:
        return "X" if is_db else ""
    return _SIZE_NAMES.get(data_size, "")


def string_to_data_size(text: str, is_db: bool) -> PlcDataSize | None:
    """Return the data size named by ``text`` (case-insensitive) or None."""
    text = text.upper()
    if text == "" and not is_db:
        return PlcDataSize.BIT
    if text == "X":
        return PlcDataSize.BIT if is_db else None
    return _SIZE_LETTERS.get(text)


def data_size_in_bits(data_size: PlcDataSize) -> int:
    """Return the number of bits of a data size."""
    return _SIZE_BITS[data_size]


def _first_non_digit(text: str) -> int | None:
    return next((pos for pos, char in enumerate(text) if char not in _DIGITS), None)


def _all_digits(text: str) -> bool:
    return all(char in _DIGITS for char in text)


@dataclass(frozen=True)
class PlcAddress:
    """An address in PLC memory, such as ``DB1.DBW4`` or ``I0.2``."""

    area: PlcArea
    area_number: int
    data_size: PlcDataSize
    start_byte: int
    start_bit: int = 0

    def __post_init__(self) -> None:
        if self.area is not PlcArea.DB and self.area_number != 0:
            raise PlcAddressError("only DB addresses may have an area number")
        if self.data_size is not PlcDataSize.BIT and self.start_bit != 0:
            raise PlcAddressError("a start bit is only allowed for bit addresses")
        if not 0 <= self.start_bit <= 7:
            raise PlcAddressError("start bit must be between 0 and 7")
        if self.start_byte < 0:
            raise PlcAddressError("start byte must not be negative")

    @classmethod
    def create(
        cls,
        area: PlcArea,
        area_number: int,
        data_size: PlcDataSize,
        start_byte: int,
        start_bit: int,
    ) -> PlcAddress:
        """Build an address from its parts, raising PlcAddressError if inconsistent."""
        return cls(area, area_number, data_size, start_byte, start_bit)

    @classmethod
    def parse(cls, text: str) -> PlcAddress:
        """Parse an address string, raising PlcAddressError if it is not valid."""
        original = text

        def fail(reason: str) -> PlcAddressError:
            return PlcAddressError(f"invalid PLC address {original!r}: {reason}")

        if len(text) < 2:
            raise fail("too short")
        area = string_to_area(text[:2])
        if area is not None:
            text = text[2:]
        else:
            area = string_to_area(text[:1])
            if area is None:
                raise fail("unknown area")
            text = text[1:]
        if not text:
            raise fail("only an area is given")

        area_number = 0
        if area is PlcArea.DB:
            pos = _first_non_digit(text)
            if pos is None:
                raise fail("missing DB separator")
            if pos == 0:
                raise fail("missing DB number")
            area_number = int(text[:pos])
            text = text[pos + 1 :]
            if len(text) < 2 or string_to_area(text[:2]) is not PlcArea.DB:
                raise fail("expected 'DB' after the DB number")
            text = text[2:]
        elif area in (PlcArea.TIMER, PlcArea.COUNTER):
            if not _all_digits(text):
                raise fail("timers and counters take a number only")
            return cls(area, 0, PlcDataSize.WORD, int(text), 0)

        if len(text) < 2:
            raise fail("too short")
        is_db = area is PlcArea.DB
        data_size = string_to_data_size(text[:1], is_db)
        if data_size is None:
            if not is_db and text[0] in _DIGITS:
                data_size = PlcDataSize.BIT
            else:
                raise fail("unknown data size")
        else:
            text = text[1:]

        start_bit = 0
        if data_size is PlcDataSize.BIT:
            pos = _first_non_digit(text)
            if pos is None or text[pos] != ".":
                raise fail("bit address needs a dot")
            start_byte = int(text[:pos] or "0")
            text = text[pos + 1 :]
            if len(text) != 1 or not _all_digits(text):
                raise fail("exactly one digit must follow the dot")
            start_bit = int(text)
            if start_bit > 7:
                raise fail("start bit must be between 0 and 7")
        else:
            if not _all_digits(text):
                raise fail("illegal character")
            start_byte = int(text)
        return cls(area, area_number, data_size, start_byte, start_bit)

    def __str__(self) -> str:
        parts = [area_to_string(self.area)]
        if self.area is PlcArea.DB:
            parts += [str(self.area_number), ".", area_to_string(PlcArea.DB)]
        if self.area not in (PlcArea.TIMER, PlcArea.COUNTER):
            parts.append(data_size_to_string(self.data_size, self.area is PlcArea.DB))
        parts.append(str(self.start_byte))
        if self.data_size is PlcDataSize.BIT:
            parts += [".", str(self.start_bit)]
        return "".join(parts)