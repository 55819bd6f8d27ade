#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import math
import struct

from rideio._util import binary


def test_little_endian_by_default():
    buffer = struct.pack('<HiB', 0x1234, -5, 200)
    assert binary.read_value(buffer, 0, 2, 0x84) == 0x1234
    assert binary.read_value(buffer, 2, 4, 0x85) == -5
    assert binary.read_value(buffer, 6, 1, 0x02) == 200


def test_big_endian():
    buffer = struct.pack('>I', 123456)
    assert binary.read_value(buffer, 0, 4, 0x86, endian='>') == 123456
    assert binary.read_value(buffer, 0, 4, 0x86) != 123456


def test_floats():
    buffer = struct.pack('<fd', 1.5, -2.25)
    assert binary.read_value(buffer, 0, 4, 0x88) == 1.5
    assert binary.read_value(buffer, 4, 8, 0x89) == -2.25


def test_out_of_bounds():
    buffer = b'\x01\x02\x03'
    assert binary.read_value(buffer, 2, 2, 0x84) is None
    assert binary.read_value(buffer, 3, 1, 0x02) is None
    assert binary.read_value(buffer, -1, 1, 0x02) is None
    assert binary.read_value(b'', 0, 1, 0x02) is None


def test_unsupported_type_or_width():
    buffer = b'\x00' * 8
    assert binary.read_value(buffer, 0, 4, 0x07) is None    # string
    assert binary.read_value(buffer, 0, 2, 0x86) is None    # uint32 in 2 bytes


def test_invalid_markers_are_returned_raw():
    buffer = struct.pack('<HBi', 0xFFFF, 0xFF, 0x7FFFFFFF)
    assert binary.read_value(buffer, 0, 2, 0x84) == 0xFFFF
    assert binary.read_value(buffer, 2, 1, 0x02) == 0xFF
    assert binary.read_value(buffer, 3, 4, 0x85) == 0x7FFFFFFF


def test_base_type_lookup():
    assert binary.get_base_type(0x84).name == 'uint16'
    assert binary.get_base_type(0x04).name == 'uint16'   # no endian bit
    assert binary.get_base_type(0x07) is None
    assert binary.BASE_TYPES_BY_NAME['sint32'].size == 4


def test_is_invalid():
    uint8 = binary.BASE_TYPES_BY_NAME['uint8']
    assert uint8.is_invalid(0xFF) and not uint8.is_invalid(0)

    uint8z = binary.BASE_TYPES_BY_NAME['uint8z']
    assert uint8z.is_invalid(0)

    float32 = binary.BASE_TYPES_BY_NAME['float32']
    assert float32.is_invalid(math.nan) and not float32.is_invalid(0.0)
