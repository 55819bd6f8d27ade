#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Reconcile the many ways a position gets written down.

Every decoder in this package (FIT, GPX, JSON documents and the activity
sync payloads) hands its raw points to this module, which is the only
place that decides what counts as a coordinate. The canonical form is a
``(lat, lng)`` tuple of floats in decimal degrees.

Recognised shapes
-----------------

==========  ============================================================
Shape       Example
==========  ============================================================
sequence    ``[lat, lng]``, ``(lat, lng, elevation)``
mapping     ``{'lat': .., 'lng': ..}``, ``{'latitude': .., 'lon': ..}``
nested      ``{'position': <sequence or mapping>, 'time': ..}``
trackpoint  an already decoded ``Trackpoint``
==========  ============================================================

Anything else, and anything outside [-90, 90] / [-180, 180], is rejected
(never clamped).

"""
from collections import namedtuple
from collections.abc import Mapping, Sequence
from datetime import datetime
from math import isfinite
import logging
import numbers

import numpy as np
import pytz

from rideio._types.trackpoint import Trackpoint, sequenced
from rideio.tools import round_half_up


logger = logging.getLogger(__name__)

LAT_KEYS = ('lat', 'latitude')
LNG_KEYS = ('lng', 'lon', 'longitude')
ELEVATION_KEYS = ('elevation', 'ele', 'alt', 'altitude')
TIMESTAMP_KEYS = ('timestamp', 'time', 'recorded_at')
NESTED_KEYS = ('position', 'coordinate', 'coordinates', 'latlng', 'point')

INT_FIELDS = {
    'power': ('power', 'watts'),
    'heart_rate': ('heart_rate', 'heartRate', 'hr'),
    'cadence': ('cadence', 'cad'),
    'temperature': ('temperature', 'temp', 'atemp'),
}
FLOAT_FIELDS = {
    'speed': ('speed',),
    'distance': ('distance',),
}

MAX_NESTING = 3

TIMESTAMP_FMT = '%Y-%m-%dT%H:%M:%SZ'

# Shape tags
SEQUENCE, MAPPING, NESTED, TRACKPOINT = (
    'sequence', 'mapping', 'nested', 'trackpoint')


NormalizedBatch = namedtuple('NormalizedBatch', ('items', 'dropped'))


class _Raw:
    """Unvalidated fields pulled out of one input value."""
    __slots__ = ('lat', 'lng', 'elevation', 'source')

    def __init__(self, lat, lng, elevation=None, source=None):
        self.lat, self.lng, self.elevation = lat, lng, elevation
        self.source = source   # mapping holding any sensor fields


def shape_of(value):
    """Tag `value` with the shape it will be decoded as, or None."""
    if isinstance(value, Trackpoint):
        return TRACKPOINT
    if isinstance(value, Mapping):
        if any(key in value for key in LAT_KEYS):
            return MAPPING
        if any(key in value for key in NESTED_KEYS):
            return NESTED
        return None
    if isinstance(value, np.ndarray):
        return SEQUENCE if value.ndim == 1 else None
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return SEQUENCE
    return None


def to_number(value):
    """A finite float from a number or numeric string, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    elif isinstance(value, numbers.Real):
        value = float(value)
    else:
        return None
    return value if isfinite(value) else None


def first_present(mapping, keys):
    """Value of the first key of `keys` that `mapping` has (and isn't None)."""
    for key in keys:
        value = mapping.get(key)
        if value is not None:
            return value
    return None


def in_range(lat, lng):
    return -90 <= lat <= 90 and -180 <= lng <= 180


# Extractors, one per shape
# -------------------------
def _from_sequence(value, depth):
    if len(value) < 2:
        return None
    elevation = value[2] if len(value) > 2 else None
    return _Raw(value[0], value[1], elevation)


def _from_mapping(value, depth):
    return _Raw(first_present(value, LAT_KEYS),
                first_present(value, LNG_KEYS),
                first_present(value, ELEVATION_KEYS),
                source=value)


def _from_nested(value, depth):
    if depth >= MAX_NESTING:
        return None
    inner = first_present(value, NESTED_KEYS)
    raw = _extract(inner, depth + 1)
    if raw is None:
        return None
    if raw.elevation is None:
        raw.elevation = first_present(value, ELEVATION_KEYS)
    # Sensor readings live alongside the position, not inside it.
    raw.source = value
    return raw


def _from_trackpoint(value, depth):
    return _Raw(value.lat, value.lng, value.elevation, source=value)


_EXTRACTORS = {
    SEQUENCE: _from_sequence,
    MAPPING: _from_mapping,
    NESTED: _from_nested,
    TRACKPOINT: _from_trackpoint,
}


def _extract(value, depth=0):
    shape = shape_of(value)
    if shape is None:
        return None
    return _EXTRACTORS[shape](value, depth)


def _validated(raw):
    """Canonical ``(lat, lng)`` from extracted fields, or None."""
    if raw is None:
        return None
    lat, lng = to_number(raw.lat), to_number(raw.lng)
    if lat is None or lng is None or not in_range(lat, lng):
        return None
    return lat, lng


# Public API
# ----------
def normalize_coordinate(value, *, with_elevation=False):
    """Reduce a coordinate-like value to ``(lat, lng)``.

    Parameters
    ----------
    value : any
        See the module docstring for the recognised shapes.
    with_elevation : bool, optional
        Return ``(lat, lng, elevation)`` instead, where elevation is taken
        from a third sequence element or an elevation key (None if absent
        or not numeric).

    Returns
    -------
    tuple or None
        None when the shape isn't recognised, a component is missing or not
        a finite number, or the position is out of range.

    Examples
    --------
        >>> normalize_coordinate({'latitude': '51.5', 'lon': -0.12})
        (51.5, -0.12)
        >>> normalize_coordinate([91, 0]) is None
        True
    """
    raw = _extract(value)
    pair = _validated(raw)
    if pair is None or not with_elevation:
        return pair
    return pair + (to_number(raw.elevation),)


def normalize_coordinates(values, *, with_elevation=False):
    """Batch form of `normalize_coordinate`.

    Returns a `NormalizedBatch` of the valid pairs, in input order, and the
    number of inputs that were dropped.
    """
    if values is None:
        return NormalizedBatch([], 0)

    coordinates, dropped = [], 0
    for value in values:
        pair = normalize_coordinate(value, with_elevation=with_elevation)
        if pair is None:
            dropped += 1
            logger.debug('dropping unusable coordinate %r', value)
        else:
            coordinates.append(pair)

    if dropped:
        logger.debug('kept %d of %d coordinates',
                     len(coordinates), len(coordinates) + dropped)
    return NormalizedBatch(coordinates, dropped)


def normalize_timestamp(value):
    """ISO-8601 text from a string or datetime (naive means UTC)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = pytz.utc.localize(value)
        return value.astimezone(pytz.utc).strftime(TIMESTAMP_FMT)
    if isinstance(value, str):
        return value.strip() or None
    return None


def _sensor_fields(source):
    if source is None:
        return {}
    if isinstance(source, Trackpoint):
        return {name: getattr(source, name)
                for name in Trackpoint.OPTIONAL if name != 'elevation'}

    fields = {'timestamp': normalize_timestamp(
        first_present(source, TIMESTAMP_KEYS))}
    for name, keys in INT_FIELDS.items():
        number = to_number(first_present(source, keys))
        fields[name] = None if number is None else round_half_up(number)
    for name, keys in FLOAT_FIELDS.items():
        fields[name] = to_number(first_present(source, keys))
    return fields


def normalize_trackpoint(value):
    """Build a `Trackpoint` from any recognised shape, or None.

    Sensor readings are picked up from mapping inputs under the usual key
    variants (``power``/``watts``, ``heart_rate``/``hr``, ...). The sequence
    index is left unset; see `normalize_trackpoints`.
    """
    raw = _extract(value)
    pair = _validated(raw)
    if pair is None:
        return None
    return Trackpoint(*pair, elevation=to_number(raw.elevation),
                      **_sensor_fields(raw.source))


def normalize_trackpoints(values):
    """Batch form of `normalize_trackpoint`.

    Returns a `NormalizedBatch` whose trackpoints are numbered 0..N-1 in
    input order.
    """
    if values is None:
        return NormalizedBatch([], 0)

    trackpoints, dropped = [], 0
    for value in values:
        trackpoint = normalize_trackpoint(value)
        if trackpoint is None:
            dropped += 1
        else:
            trackpoints.append(trackpoint)

    if dropped:
        logger.debug('kept %d of %d trackpoints',
                     len(trackpoints), len(trackpoints) + dropped)
    return NormalizedBatch(sequenced(trackpoints), dropped)


def to_coordinates(trackpoints):
    """The simplified ``[(lat, lng), ...]`` form of decoded trackpoints."""
    return [trackpoint.coordinate for trackpoint in trackpoints]
