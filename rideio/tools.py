#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
General numeric tools that complement the API.

"""
from math import floor

import numpy as np


EARTH_RADIUS = 6371e3   # metres


def haversine(lat, lng, *, fill=0):
    """Great-circle distances between adjacent points on a sphere.

    Parameters
    ----------
    lat, lng: numpy arrays or lists
        Positional coordinates in decimal degrees.
    fill: scalar
        An appropriate missing value for the start.

    Returns
    -------
    numpy array
        Distance(s) between adjacent points in metres; the same length as
        the input.

    Examples
    --------
        >>> dist = haversine([38.898556, 38.897147], [-77.037852, -77.043934])
        >>> '{:.1f} metres'.format(dist[-1])  # ignoring the leading fill
        '549.2 metres'

    References
    ----------
    http://www.movable-type.co.uk/scripts/latlong.html
    """
    lat, lng = np.radians(np.asarray(lat, dtype=float)), \
        np.radians(np.asarray(lng, dtype=float))
    if lat.size == 0:
        return np.array([], dtype=float)

    dlat, dlng = np.diff(lat), np.diff(lng)

    a = (np.sin(dlat / 2)**2
         + np.cos(lat[:-1])
         * np.cos(lat[1:])
         * np.sin(dlng / 2)**2)

    c = 2 * np.arcsin(np.sqrt(a)) * EARTH_RADIUS

    return np.concatenate(([fill], c))


def elevation_gain(elevations):
    """Sum of the positive steps in an elevation series (metres).

    Missing values (None/NaN) are ignored rather than treated as zero, so a
    gap in the altimeter doesn't count as a climb back up.

        >>> elevation_gain([100, 105, None, 103, 110])
        12.0
    """
    alt = np.asarray([np.nan if e is None else e for e in elevations],
                     dtype=float)
    alt = alt[~np.isnan(alt)]
    if alt.size < 2:
        return 0.0
    deltas = np.diff(alt)
    return float(deltas[deltas > 0].sum())


def round_half_up(value):
    """Round to the nearest integer, halves away from zero.

    Python's `round` rounds halves to even, which would turn 162.5 grams
    of carbohydrate into 162.

        >>> round_half_up(162.5), round_half_up(-2.5)
        (163, -3)
    """
    if value < 0:
        return -int(floor(-value + 0.5))
    return int(floor(value + 0.5))


def mean_of(values):
    """Arithmetic mean ignoring None; None when nothing is left."""
    present = [v for v in values if v is not None]
    if not present:
        return None
    return sum(present) / len(present)
