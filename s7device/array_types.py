"""Element field types of array records and the PLC data types they accept."""

from __future__ import annotations

from enum import Enum

from s7device.plc_address import PlcAddress, PlcDataSize, PlcDataType

__all__ = [
    "FieldType",
    "STRING_SIZE",
    "data_type_for_input",
    "data_type_for_output",
]

STRING_SIZE = 40
"""Bytes occupied by one element of a string array, terminator included."""


class FieldType(Enum):
    """Type of the elements held by an array record (its FTVL field)."""

    STRING = "string"
    CHAR = "char"
    UCHAR = "uchar"
    SHORT = "short"
    USHORT = "ushort"
    LONG = "long"
    ULONG = "ulong"
    FLOAT = "float"
    DOUBLE = "double"
    ENUM = "enum"

    @property
    def struct_format(self) -> str:
        """The struct format of one element; strings are fixed-size byte fields."""
        return _FIELD_FORMATS[self]

    @property
    def is_integer(self) -> bool:
        return self not in (FieldType.STRING, FieldType.FLOAT, FieldType.DOUBLE)


_FIELD_FORMATS = {
    FieldType.STRING: f"={STRING_SIZE}s",
    FieldType.CHAR: "=b",
    FieldType.UCHAR: "=B",
    FieldType.SHORT: "=h",
    FieldType.USHORT: "=H",
    FieldType.LONG: "=i",
    FieldType.ULONG: "=I",
    FieldType.FLOAT: "=f",
    FieldType.DOUBLE: "=d",
    FieldType.ENUM: "=H",
}

_ALL_TYPES = frozenset(PlcDataType)

_T = PlcDataType
_S = PlcDataSize

# Suggested PLC data types that an input record of each field type accepts.
_INPUT_ACCEPTED = {
    FieldType.STRING: frozenset({_T.INT8, _T.UINT8}),
    FieldType.CHAR: frozenset({_T.BOOL, _T.INT8}),
    FieldType.UCHAR: frozenset({_T.BOOL, _T.UINT8}),
    FieldType.SHORT: frozenset({_T.BOOL, _T.INT8, _T.UINT8, _T.INT16}),
    FieldType.USHORT: frozenset({_T.BOOL, _T.UINT8, _T.UINT16}),
    FieldType.LONG: frozenset(
        {_T.BOOL, _T.INT8, _T.UINT8, _T.INT16, _T.UINT16, _T.INT32}
    ),
    FieldType.ULONG: frozenset({_T.BOOL, _T.UINT8, _T.UINT16, _T.UINT32}),
    FieldType.FLOAT: _ALL_TYPES,
    FieldType.DOUBLE: _ALL_TYPES,
}

# PLC data type chosen for an input record when none is suggested.
_INPUT_DEFAULTS = {
    FieldType.STRING: {_S.BYTE: _T.INT8},
    FieldType.CHAR: {_S.BIT: _T.BOOL, _S.BYTE: _T.INT8},
    FieldType.UCHAR: {_S.BIT: _T.BOOL, _S.BYTE: _T.UINT8},
    FieldType.SHORT: {_S.BIT: _T.BOOL, _S.BYTE: _T.INT8, _S.WORD: _T.INT16},
    FieldType.USHORT: {_S.BIT: _T.BOOL, _S.BYTE: _T.UINT8, _S.WORD: _T.UINT16},
    FieldType.LONG: {
        _S.BIT: _T.BOOL,
        _S.BYTE: _T.INT8,
        _S.WORD: _T.INT16,
        _S.DWORD: _T.INT32,
    },
    FieldType.ULONG: {
        _S.BIT: _T.BOOL,
        _S.BYTE: _T.UINT8,
        _S.WORD: _T.UINT16,
        _S.DWORD: _T.UINT32,
    },
    FieldType.FLOAT: {
        _S.BIT: _T.BOOL,
        _S.BYTE: _T.UINT8,
        _S.WORD: _T.UINT16,
        _S.DWORD: _T.FLOAT,
    },
}
_INPUT_DEFAULTS[FieldType.DOUBLE] = _INPUT_DEFAULTS[FieldType.FLOAT]

# Suggested PLC data types that an output record of each field type accepts.
_OUTPUT_ACCEPTED = {
    FieldType.STRING: frozenset({_T.INT8, _T.UINT8}),
    FieldType.CHAR: frozenset({_T.BOOL, _T.INT8, _T.INT16, _T.INT32, _T.FLOAT}),
    FieldType.UCHAR: frozenset(
        {_T.BOOL, _T.UINT8, _T.INT16, _T.UINT16, _T.INT32, _T.UINT32, _T.FLOAT}
    ),
    FieldType.SHORT: frozenset({_T.BOOL, _T.INT16, _T.INT32, _T.FLOAT}),
    FieldType.USHORT: frozenset({_T.BOOL, _T.UINT16, _T.INT32, _T.UINT32, _T.FLOAT}),
    FieldType.LONG: frozenset({_T.BOOL, _T.INT32, _T.FLOAT}),
    FieldType.ULONG: frozenset({_T.BOOL, _T.UINT32, _T.FLOAT}),
    FieldType.FLOAT: frozenset({_T.FLOAT}),
    FieldType.DOUBLE: frozenset({_T.FLOAT}),
}

# PLC data type chosen for an output record when none is suggested.
_OUTPUT_DEFAULTS = {
    FieldType.STRING: {_S.BYTE: _T.INT8},
    FieldType.CHAR: {
        _S.BIT: _T.BOOL,
        _S.BYTE: _T.INT8,
        _S.WORD: _T.INT16,
        _S.DWORD: _T.INT32,
    },
    FieldType.UCHAR: {
        _S.BIT: _T.BOOL,
        _S.BYTE: _T.UINT8,
        _S.WORD: _T.UINT16,
        _S.DWORD: _T.UINT32,
    },
    FieldType.SHORT: {_S.BIT: _T.BOOL, _S.WORD: _T.INT16, _S.DWORD: _T.INT32},
    FieldType.USHORT: {_S.BIT: _T.BOOL, _S.WORD: _T.UINT16, _S.DWORD: _T.UINT32},
    FieldType.LONG: {_S.BIT: _T.BOOL, _S.DWORD: _T.INT32},
    FieldType.ULONG: {_S.BIT: _T.BOOL, _S.DWORD: _T.UINT32},
    FieldType.FLOAT: {_S.BIT: _T.BOOL, _S.DWORD: _T.FLOAT},
}
_OUTPUT_DEFAULTS[FieldType.DOUBLE] = _OUTPUT_DEFAULTS[FieldType.FLOAT]


def _normalise(field_type: FieldType) -> FieldType:
    # An enum element is stored as an unsigned short.
    return FieldType.USHORT if field_type is FieldType.ENUM else field_type


def _choose(
    accepted: dict[FieldType, frozenset[PlcDataType]],
    defaults: dict[FieldType, dict[PlcDataSize, PlcDataType]],
    address: PlcAddress,
    suggestion: PlcDataType | None,
    field_type: FieldType,
) -> PlcDataType | None:
    field_type = _normalise(field_type)
    if suggestion is not None:
        return suggestion if suggestion in accepted[field_type] else None
    return defaults[field_type].get(address.data_size)


def data_type_for_input(
    address: PlcAddress, suggestion: PlcDataType | None, field_type: FieldType
) -> PlcDataType | None:
    """Return the PLC data type an input array record reads.

    A suggested type is returned if the field type can hold it, otherwise
    None. Without a suggestion the type follows from the address's data size,
    or None if that size does not suit the field type.
    """
    return _choose(_INPUT_ACCEPTED, _INPUT_DEFAULTS, address, suggestion, field_type)


def data_type_for_output(
    address: PlcAddress, suggestion: PlcDataType | None, field_type: FieldType
) -> PlcDataType | None:
    """Return the PLC data type an output array record writes.

    A suggested type is returned if the field type's values fit in it,
    otherwise None. Without a suggestion the type follows from the address's
    data size, or None if that size does not suit the field type.
    """
    return _choose(_OUTPUT_ACCEPTED, _OUTPUT_DEFAULTS, address, suggestion, field_type)