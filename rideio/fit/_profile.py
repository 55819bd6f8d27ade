#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
The small slice of the FIT profile this package decodes.

Only the ``record`` message (global message number 20) is turned into
trackpoints. Scales and offsets follow the FIT SDK convention: the raw
value is divided by the scale and then the offset is subtracted.

"""
from datetime import datetime

import pytz


FIT_SIGNATURE = b'.FIT'

FIT_EPOCH = datetime(1989, 12, 31, tzinfo=pytz.utc)   # "FIT time zero"

SEMICIRCLES_TO_DEGREES = 180 / 2**31

GLOBAL_MESG_NUMS = {
    0: 'file_id',
    18: 'session',
    19: 'lap',
    20: 'record',
    21: 'event',
    23: 'device_info',
    34: 'activity',
}

RECORD_MESG_NUM = 20


def semicircles_to_degrees(semicircles):
    """Positional data conversion for *.fit files (no wrapping)."""
    return semicircles * SEMICIRCLES_TO_DEGREES


class FieldProfile:
    """How to turn a raw record field into a trackpoint attribute."""
    __slots__ = ('name', 'invalid', 'scale', 'offset', 'units', 'convert')

    def __init__(self, name, invalid, *, scale=1, offset=0, units='',
                 convert=None):
        self.name = name
        self.invalid = invalid     # the "missing" sentinel
        self.scale = scale
        self.offset = offset
        self.units = units
        self.convert = convert

    def __repr__(self):
        return 'FieldProfile(%s)' % self.name

    def apply(self, raw):
        """Raw value --> semantic value, or None for the sentinel."""
        if raw is None or raw == self.invalid:
            return None
        if self.convert is not None:
            return self.convert(raw)
        if self.scale == 1 and self.offset == 0:
            return raw
        return raw / self.scale - self.offset


# record message, by field definition number
RECORD_FIELDS = {
    253: FieldProfile('timestamp', 0xFFFFFFFF, units='s'),
    0: FieldProfile('position_lat', 0x7FFFFFFF, units='degrees',
                    convert=semicircles_to_degrees),
    1: FieldProfile('position_long', 0x7FFFFFFF, units='degrees',
                    convert=semicircles_to_degrees),
    2: FieldProfile('altitude', 0xFFFF, scale=5, offset=500, units='m'),
    3: FieldProfile('heart_rate', 0xFF, units='bpm'),
    4: FieldProfile('cadence', 0xFF, units='rpm'),
    5: FieldProfile('distance', 0xFFFFFFFF, scale=100, units='m'),
    6: FieldProfile('speed', 0xFFFF, scale=1000, units='m/s'),
    7: FieldProfile('power', 0xFFFF, units='watts'),
    13: FieldProfile('temperature', 0x7F, units='C'),
}
