#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
The canonical unit produced by every decoder in this package.

"""


class Trackpoint:
    """A single geographic sample with optional sensor readings.

    Attributes
    ----------
    lat, lng : float
        Position in decimal degrees. Always within [-90, 90] and
        [-180, 180] respectively; instances are built by
        ``rideio.coords.normalize_trackpoint``, which drops anything else.
    elevation : float or None
        Metres.
    timestamp : str or None
        ISO-8601, UTC.
    power, heart_rate, cadence : int or None
        Watts, bpm, rpm.
    speed : float or None
        Metres per second.
    distance : float or None
        Cumulative metres, when the source records it.
    temperature : int or None
        Degrees Celsius.
    sequence_index : int or None
        Position in the decoded output (0..N-1), assigned by the decoder.
    """
    __slots__ = ('lat', 'lng', 'elevation', 'timestamp', 'power',
                 'heart_rate', 'cadence', 'speed', 'distance', 'temperature',
                 'sequence_index')

    OPTIONAL = __slots__[2:-1]

    def __init__(self, lat, lng, *, elevation=None, timestamp=None,
                 power=None, heart_rate=None, cadence=None, speed=None,
                 distance=None, temperature=None, sequence_index=None):
        self.lat, self.lng = lat, lng
        self.elevation = elevation
        self.timestamp = timestamp
        self.power = power
        self.heart_rate = heart_rate
        self.cadence = cadence
        self.speed = speed
        self.distance = distance
        self.temperature = temperature
        self.sequence_index = sequence_index

    def __repr__(self):
        extras = ''.join(', {}={!r}'.format(name, getattr(self, name))
                         for name in self.OPTIONAL
                         if getattr(self, name) is not None)
        return 'Trackpoint(#{}, lat={!r}, lng={!r}{})'.format(
            self.sequence_index, self.lat, self.lng, extras)

    def __eq__(self, other):
        if not isinstance(other, Trackpoint):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name)
                   for name in self.__slots__)

    @property
    def coordinate(self):
        """The simplified ``(lat, lng)`` pair used for map display."""
        return self.lat, self.lng

    def to_dict(self):
        return {name: getattr(self, name) for name in self.__slots__}


def sequenced(trackpoints):
    """Number trackpoints 0..N-1 in the order given (in place)."""
    for i, trackpoint in enumerate(trackpoints):
        trackpoint.sequence_index = i
    return trackpoints
