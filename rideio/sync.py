#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Turn synced activities into stored routes.

Vendor activity payloads arrive in many shapes: positions may live under
``route_points``, ``coordinates``, ``latlng`` and so on, written as arrays
or objects. This module finds them (leaving every shape decision to
`rideio.coords`), shapes trackpoints into rows for the persistence layer,
and works out the route's energy summary.

Storage is whatever implements `RouteStore`; nothing here keeps state of
its own between calls.

"""
from abc import ABC, abstractmethod
from collections import namedtuple
from collections.abc import Mapping
import logging

from rideio import coords, energy, tools
from rideio.config import get_settings
from rideio._util.reader import read_activity


logger = logging.getLogger(__name__)

# Where payloads keep their positions, in the order they're tried.
COORDINATE_SOURCES = (
    ('route_points',),
    ('coordinates',),
    ('latlng',),
    ('path',),
    ('points',),
    ('track_points',),
    ('track_data',),
    ('waypoints',),
    ('geometry', 'coordinates'),
)

TRACKPOINT_SOURCES = (
    ('trackpoints',),
    ('route_points',),
)

ROW_FIELDS = ('route_id', 'sequence_index', 'lat', 'lng', 'elevation',
              'recorded_at', 'power', 'heart_rate', 'cadence')


IngestResult = namedtuple(
    'IngestResult',
    ('route_id', 'file_type', 'coordinate_count', 'trackpoint_count',
     'dropped', 'energy'))


def _lookup(payload, path):
    value = payload
    for key in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


def _first_batch(payload, sources, normalize):
    """First source in `payload` that gives any valid items."""
    if not isinstance(payload, Mapping):
        return coords.NormalizedBatch([], 0), None

    dropped = 0
    for path in sources:
        values = _lookup(payload, path)
        if not isinstance(values, (list, tuple)) or not values:
            continue
        batch = normalize(values)
        dropped += batch.dropped
        if batch.items:
            return coords.NormalizedBatch(batch.items, dropped), '.'.join(path)
        logger.warning('%s: none of %d entries has a recognisable position',
                       '.'.join(path), len(values))

    return coords.NormalizedBatch([], dropped), None


def extract_activity_coordinates(payload):
    """``(lat, lng)`` pairs from a vendor activity payload.

    Returns
    -------
    NormalizedBatch
        Coordinates from the first container that has any, and the number
        of entries dropped along the way.
    """
    batch, source = _first_batch(payload, COORDINATE_SOURCES,
                                 coords.normalize_coordinates)
    if batch.dropped:
        logger.warning('dropped %d unusable coordinates from %s',
                       batch.dropped, source or 'payload')
    return batch


def extract_activity_trackpoints(payload):
    """Detailed trackpoints from a vendor activity payload.

    Returns
    -------
    NormalizedBatch
    """
    batch, source = _first_batch(payload, TRACKPOINT_SOURCES,
                                 coords.normalize_trackpoints)
    if batch.dropped:
        logger.warning('dropped %d unusable trackpoints from %s',
                       batch.dropped, source or 'payload')
    return batch


def trackpoint_rows(route_id, trackpoints):
    """The stored form of decoded trackpoints, one dict per point."""
    return [{
        'route_id': route_id,
        'sequence_index': tp.sequence_index,
        'lat': tp.lat,
        'lng': tp.lng,
        'elevation': tp.elevation,
        'recorded_at': tp.timestamp,
        'power': tp.power,
        'heart_rate': tp.heart_rate,
        'cadence': tp.cadence,
    } for tp in trackpoints]


def coordinate_rows(route_id, coordinates):
    """Rows for points that only have a position."""
    rows = []
    for i, (lat, lng) in enumerate(coordinates):
        row = dict.fromkeys(ROW_FIELDS)
        row.update(route_id=route_id, sequence_index=i, lat=lat, lng=lng)
        rows.append(row)
    return rows


def batched(rows, size=None):
    """Split `rows` into lists of at most `size` (the store batch size)."""
    size = size or get_settings().store_batch_size
    for start in range(0, len(rows), size):
        yield rows[start:start + size]


def energy_fields(summary):
    """Route columns for a `RouteEnergySummary`."""
    return {
        'calories_power_based': summary.calories_power_based,
        'calories_estimated': summary.calories_estimated,
        'fat_grams': summary.fat_grams,
        'carb_grams': summary.carb_grams,
        'protein_grams': summary.protein_grams,
        'average_power': summary.average_power,
    }


class RouteStore(ABC):
    """What ingestion needs from the persistence layer."""

    @abstractmethod
    def replace_route_points(self, route_id, rows):
        """Delete a route's stored points and insert `rows` (an iterable
        of row batches). Returns the number of rows stored."""

    @abstractmethod
    def update_route(self, route_id, fields):
        """Set columns on the route itself."""

    def record_payload(self, route_id, payload):
        """Keep the raw vendor payload around for debugging (optional)."""


class MemoryRouteStore(RouteStore):
    """A `RouteStore` that keeps everything in dictionaries."""

    def __init__(self):
        self.points = {}
        self.routes = {}
        self.payloads = {}

    def replace_route_points(self, route_id, rows):
        self.points[route_id] = [row for batch in rows for row in batch]
        return len(self.points[route_id])

    def update_route(self, route_id, fields):
        self.routes.setdefault(route_id, {}).update(fields)

    def record_payload(self, route_id, payload):
        self.payloads[route_id] = payload

    def last_payload(self, route_id):
        return self.payloads.get(route_id)


def _route_metrics(payload, trackpoints):
    """Duration, distance, climb and average power for the energy estimate."""
    payload = payload if isinstance(payload, Mapping) else {}
    duration = coords.to_number(payload.get('duration_seconds')) or 0
    distance = coords.to_number(payload.get('distance'))
    elevation = coords.to_number(payload.get('elevation'))
    average_power = coords.to_number(payload.get('average_power'))

    if trackpoints:
        if distance is None:
            distance = float(sum(tools.haversine(
                [tp.lat for tp in trackpoints],
                [tp.lng for tp in trackpoints]))) / 1000
        if elevation is None:
            elevation = tools.elevation_gain(
                [tp.elevation for tp in trackpoints])

    return duration, distance, elevation, average_power


def ingest_activity(store, route_id, *, content=None, payload=None,
                    file_type=None, url=None, rider_mass_kg=None,
                    wind_samples=None, **kwargs):
    """Decode an activity and store its points and energy summary.

    Parameters
    ----------
    store : RouteStore
    route_id : str
        Opaque; only used to tag what's stored.
    content : bytes or str, optional
        A downloaded activity file (FIT, GPX or JSON).
    payload : dict, optional
        The vendor's activity record. Used for positions when there is no
        file (or the file has none), and for ``duration_seconds``,
        ``distance`` (km), ``elevation`` (gain, m) and ``average_power``.
    rider_mass_kg : float, optional
    wind_samples : iterable of dict, optional
        ``{speed, direction, timestamp}`` weather samples for the route.
    **kwargs
        Passed on to the file decoder.

    Returns
    -------
    IngestResult
    """
    if payload is not None:
        store.record_payload(route_id, payload)

    file_type_found, coordinates, trackpoints, dropped = None, [], [], 0
    if content:
        decoded = read_activity(content, file_type=file_type, url=url,
                                **kwargs)
        file_type_found = decoded.file_type
        coordinates, trackpoints = decoded.coordinates, decoded.trackpoints

    if not trackpoints and payload is not None:
        batch = extract_activity_trackpoints(payload)
        trackpoints, dropped = batch.items, batch.dropped
        if trackpoints:
            coordinates = coords.to_coordinates(trackpoints)

    if not coordinates and payload is not None:
        batch = extract_activity_coordinates(payload)
        coordinates, dropped = batch.items, dropped + batch.dropped

    if trackpoints:
        rows = trackpoint_rows(route_id, trackpoints)
    else:
        rows = coordinate_rows(route_id, coordinates)

    stored = 0
    if rows:
        stored = store.replace_route_points(route_id, batched(rows))
        store.update_route(route_id, {
            'coordinates': [list(pair) for pair in coordinates]})
    logger.info('route %s: stored %d points (%d dropped)',
                route_id, stored, dropped)

    duration, distance, elevation, average_power = _route_metrics(
        payload, trackpoints)

    summary = energy.summarize_route_energy(
        duration_seconds=duration, distance_km=distance,
        elevation_gain_m=elevation, average_power=average_power,
        trackpoints=trackpoints, rider_mass_kg=rider_mass_kg,
        wind_samples=wind_samples)
    store.update_route(route_id, energy_fields(summary))

    return IngestResult(route_id, file_type_found, len(coordinates),
                        len(trackpoints), dropped, summary)
