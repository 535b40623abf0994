"""S7 PLC addresses, record value conversion, poll groups and millisecond timing helpers."""

__version__ = "0.1.0"