#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import numpy as np
from pandas import DataFrame, TimedeltaIndex, to_datetime

from rideio import energy, tools
from rideio._types import columns as special_columns


# Trackpoint attribute --> column name
TRACKPOINT_COLUMNS = {
    'lat': special_columns.Latitude.colname,
    'lng': special_columns.Longitude.colname,
    'elevation': special_columns.Altitude.colname,
    'power': special_columns.Power.colname,
    'heart_rate': special_columns.HeartRate.colname,
    'cadence': special_columns.Cadence.colname,
    'speed': special_columns.Speed.colname,
    'distance': special_columns.Distance.colname,
    'temperature': special_columns.Temperature.colname,
}


class ActivityData(DataFrame):
    """A table of trackpoints, one row per sample.

    The index is the elapsed time since the first sample when timestamps
    are available (a `TimedeltaIndex` named ``time``); otherwise it is the
    sequence index of the points.
    """
    _metadata = ['start']

    @property
    def _constructor(self):
        return self.__class__

    def __finalize__(self, other, method=None, **kwargs):
        """Propagate metadata from other to self."""
        for name in self._metadata:
            object.__setattr__(self, name, getattr(other, name, None))
        return self

    def __getitem__(self, key):
        """Create the illusion of Series subclasses in the DataFrame."""
        item = super().__getitem__(key)
        column_cls = (special_columns.REGISTRY.get(key)
                      if isinstance(key, str) else None)
        if column_cls is None:
            return item
        return column_cls(item)

    @classmethod
    def from_trackpoints(cls, trackpoints):
        """Build a table from decoded `Trackpoint` objects."""
        records = [
            dict({col: getattr(tp, attr)
                  for attr, col in TRACKPOINT_COLUMNS.items()},
                 timestamp=tp.timestamp)
            for tp in trackpoints]

        data = cls(DataFrame.from_records(
            records, columns=list(TRACKPOINT_COLUMNS.values()) + ['timestamp']))
        timestamps = data.pop('timestamp')
        data = data.astype('float64')

        if len(timestamps) and timestamps.notnull().all():
            timestamps = to_datetime(timestamps, utc=True)
            start = timestamps.iloc[0]
            data.index = TimedeltaIndex(timestamps - start, name='time')
        else:
            data.index.name = 'sequence_index'
            start = None

        # No point hanging on to completely empty columns!
        keep = ('lat', 'lon')
        empty = [col for col in data.columns
                 if col not in keep and data[col].isnull().all()]
        data = data.drop(columns=empty)
        data.start = start
        return data

    @property
    def time(self):   # makes accessing the index more readable
        if isinstance(self.index, TimedeltaIndex):
            return self.index
        else:
            # because recursion problems with super().__getattr__()
            raise AttributeError('index is not TimedeltaIndex')

    def haversine(self):
        """Distance covered since the previous sample, in metres."""
        return tools.haversine(self['lat'].values, self['lon'].values)

    def distance_km(self):
        """Total distance, preferring the recorded odometer."""
        if 'dist' in self and self['dist'].notnull().any():
            dist = self['dist'].dropna()
            return float(dist.iloc[-1] - dist.iloc[0]) / 1000
        return float(np.sum(self.haversine())) / 1000

    def elevation_gain(self):
        if 'alt' not in self:
            return 0.0
        return tools.elevation_gain(self['alt'].values)

    def duration_seconds(self):
        try:
            time = self.time
        except AttributeError:
            return 0.0
        if len(time) == 0:
            return 0.0
        return float((time[-1] - time[0]).total_seconds())

    def average_power(self):
        if 'pwr' not in self:
            return None
        return self['pwr'].mean_positive()

    def energy(self, *, rider_mass_kg=None, wind_samples=None):
        """Estimate the energy cost of this activity.

        See ``rideio.energy.summarize_route_energy``.
        """
        return energy.summarize_route_energy(
            duration_seconds=self.duration_seconds(),
            distance_km=self.distance_km(),
            elevation_gain_m=self.elevation_gain(),
            average_power=self.average_power(),
            rider_mass_kg=rider_mass_kg,
            wind_samples=wind_samples)
