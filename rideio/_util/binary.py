#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Read fixed-width numbers out of a byte buffer.

The FIT base types are described by a one byte tag. Bits 0-4 give the type
number; bit 7 flags a multi-byte ("endian ability") type. Only the numeric
base types are supported here; strings and raw byte arrays are skipped by
the caller.

"""
from math import isnan
import struct


class BaseType:
    __slots__ = ('name', 'identifier', 'fmt', 'invalid')

    def __init__(self, **kwargs):
        for name, value in kwargs.items():
            setattr(self, name, value)

    def __repr__(self):
        return 'BaseType(%s)' % self.name

    @property
    def size(self):
        return struct.calcsize(self.fmt)

    @property
    def type_num(self):
        return self.identifier & 0x1F

    def is_invalid(self, value):
        """Whether `value` is this type's "no data" marker."""
        if self.invalid is None:   # floats
            return isnan(value)
        return value == self.invalid


BASE_TYPES = {
    0x00: BaseType(name='enum',    identifier=0x00, fmt='B', invalid=0xFF),
    0x01: BaseType(name='sint8',   identifier=0x01, fmt='b', invalid=0x7F),
    0x02: BaseType(name='uint8',   identifier=0x02, fmt='B', invalid=0xFF),
    0x83: BaseType(name='sint16',  identifier=0x83, fmt='h', invalid=0x7FFF),
    0x84: BaseType(name='uint16',  identifier=0x84, fmt='H', invalid=0xFFFF),
    0x85: BaseType(name='sint32',  identifier=0x85, fmt='i', invalid=0x7FFFFFFF),
    0x86: BaseType(name='uint32',  identifier=0x86, fmt='I', invalid=0xFFFFFFFF),
    0x88: BaseType(name='float32', identifier=0x88, fmt='f', invalid=None),
    0x89: BaseType(name='float64', identifier=0x89, fmt='d', invalid=None),
    0x0A: BaseType(name='uint8z',  identifier=0x0A, fmt='B', invalid=0x00),
    0x8B: BaseType(name='uint16z', identifier=0x8B, fmt='H', invalid=0x0000),
    0x8C: BaseType(name='uint32z', identifier=0x8C, fmt='I', invalid=0x00000000),
    0x0D: BaseType(name='byte',    identifier=0x0D, fmt='B', invalid=0xFF),
}

BASE_TYPES_BY_NAME = {bt.name: bt for bt in BASE_TYPES.values()}

# Some encoders write the tag without the endian-ability bit.
_BY_TYPE_NUM = {bt.type_num: bt for bt in BASE_TYPES.values()}


def get_base_type(tag):
    """Look up a base type by its tag byte, or None if unsupported."""
    base_type = BASE_TYPES.get(tag)
    if base_type is None:
        base_type = _BY_TYPE_NUM.get(tag & 0x1F)
    return base_type


def read_value(buffer, offset, size, base_type, *, endian='<'):
    """Decode a single number from `buffer`.

    Parameters
    ----------
    buffer : bytes-like
        The data to read from.
    offset : int
        Byte position of the first byte of the value.
    size : int
        Width of the value in bytes (1, 2, 4 or 8).
    base_type : int or BaseType
        FIT base type tag (or an already resolved `BaseType`).
    endian : str, optional
        A `struct` byte order character; FIT data is little endian unless
        the definition message says otherwise.

    Returns
    -------
    int, float or None
        None if the read would run past the end of `buffer`, or if the
        base type is unsupported or doesn't have the requested width. The
        raw value is returned untouched; invalid-value markers are *not*
        filtered here (see `BaseType.is_invalid`).
    """
    if not isinstance(base_type, BaseType):
        base_type = get_base_type(base_type)

    if base_type is None or base_type.size != size:
        return None

    if offset < 0 or offset + size > len(buffer):
        return None

    value, = struct.unpack_from(endian + base_type.fmt, buffer, offset)
    return value
