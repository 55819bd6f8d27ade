#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Series subclasses for the columns of an `ActivityData` table.

Each class knows its column name and base unit.

"""
from pandas import Series


REGISTRY = {}    # grows at import-time via the below metaclass


class SpecialRegistrar(type):
    def __init__(cls, name, bases, namespace):
        if name != 'SpecialColumn':
            REGISTRY[cls.colname] = cls
        super().__init__(name, bases, namespace)


class SpecialColumn(Series, metaclass=SpecialRegistrar):
    colname = None
    base_unit = None

    def __init__(self, data=None, *args, **kwargs):
        super().__init__(data, *args, **kwargs)
        self.name = type(self).colname     # use *class* attribute

    @property
    def _constructor(self):
        # Arithmetic on a special column gives back a plain Series.
        return Series


class Altitude(SpecialColumn):
    colname = 'alt'
    base_unit = 'm'


class Cadence(SpecialColumn):
    colname = 'cad'
    base_unit = 'rpm'


class Distance(SpecialColumn):
    colname = 'dist'
    base_unit = 'm'


class HeartRate(SpecialColumn):
    colname = 'hr'
    base_unit = 'bpm'


class LonLat(SpecialColumn):
    colname = 'lonlat'
    base_unit = 'degrees'


class Longitude(LonLat):
    colname = 'lon'


class Latitude(LonLat):
    colname = 'lat'


class Power(SpecialColumn):
    colname = 'pwr'
    base_unit = 'watts'

    def mean_positive(self):
        """Average of the non-zero readings, or None without any."""
        positive = self[self > 0]
        if positive.empty:
            return None
        return float(positive.mean())


class Speed(SpecialColumn):
    colname = 'speed'
    base_unit = 'm/s'


class Temperature(SpecialColumn):
    colname = 'temp'
    base_unit = 'degrees_C'
