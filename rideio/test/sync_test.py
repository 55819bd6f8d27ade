#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import logging

import pytest

from rideio import energy, sync
from rideio._types import Trackpoint


GPX = '''<gpx><trk><trkseg>
  <trkpt lat="46.0" lon="7.0"><ele>1000</ele><time>2021-06-01T08:00:00Z</time>
    <extensions><power>180</power></extensions></trkpt>
  <trkpt lat="46.01" lon="7.0"><ele>1040</ele><time>2021-06-01T08:05:00Z</time>
    <extensions><power>220</power></extensions></trkpt>
</trkseg></trk></gpx>'''


def test_coordinate_container_order():
    payload = {
        'waypoints': [[9, 9]],
        'latlng': [[1, 2], [3, 4]],
        'coordinates': [],
        'geometry': {'coordinates': [[5, 6]]},
    }
    batch = sync.extract_activity_coordinates(payload)
    assert batch.items == [(1.0, 2.0), (3.0, 4.0)]
    assert batch.dropped == 0


def test_invalid_container_falls_through(caplog):
    payload = {'route_points': [{'foo': 1}, 'bar'],
               'path': [{'lat': 1, 'lon': 2}, {'lat': 95, 'lon': 2}]}

    with caplog.at_level(logging.WARNING, logger='rideio.sync'):
        batch = sync.extract_activity_coordinates(payload)

    assert batch.items == [(1.0, 2.0)]
    assert batch.dropped == 3
    assert any('dropped 3' in r.getMessage() for r in caplog.records)


def test_geometry_coordinates():
    payload = {'geometry': {'type': 'LineString',
                            'coordinates': [[10, 20], [11, 21]]}}
    assert sync.extract_activity_coordinates(payload).items == [
        (10.0, 20.0), (11.0, 21.0)]


@pytest.mark.parametrize('payload', [None, [], 'x', {}, {'points': 'abc'}])
def test_nothing_in_payload(payload):
    assert sync.extract_activity_coordinates(payload) == ([], 0)


def test_activity_trackpoints():
    payload = {'trackpoints': [
        {'lat': 1, 'lng': 2, 'power': 150, 'heart_rate': 120},
        {'lat': 1.1, 'lng': 2, 'power': 160},
    ]}
    batch = sync.extract_activity_trackpoints(payload)

    assert [tp.power for tp in batch.items] == [150, 160]
    assert [tp.sequence_index for tp in batch.items] == [0, 1]


def test_trackpoint_rows():
    tp = Trackpoint(1.0, 2.0, elevation=3.0, timestamp='2021-01-01T00:00:00Z',
                    power=100, heart_rate=120, cadence=80, speed=9.0,
                    sequence_index=0)

    row, = sync.trackpoint_rows('route-1', [tp])

    assert row == {'route_id': 'route-1', 'sequence_index': 0, 'lat': 1.0,
                   'lng': 2.0, 'elevation': 3.0,
                   'recorded_at': '2021-01-01T00:00:00Z', 'power': 100,
                   'heart_rate': 120, 'cadence': 80}
    assert tuple(row) == sync.ROW_FIELDS


def test_batched():
    rows = list(range(250))
    batches = list(sync.batched(rows, 100))
    assert [len(b) for b in batches] == [100, 100, 50]
    assert list(sync.batched([], 100)) == []


def test_store_is_abstract():
    with pytest.raises(TypeError):
        sync.RouteStore()


def test_ingest_file():
    store = sync.MemoryRouteStore()

    result = sync.ingest_activity(
        store, 'r1', content=GPX, payload={'duration_seconds': 300},
        rider_mass_kg=70)

    assert result.file_type == 'gpx'
    assert result.trackpoint_count == 2
    rows = store.points['r1']
    assert [row['power'] for row in rows] == [180, 220]
    assert [row['sequence_index'] for row in rows] == [0, 1]

    route = store.routes['r1']
    assert route['coordinates'] == [[46.0, 7.0], [46.01, 7.0]]
    assert route['average_power'] == 200
    assert route['calories_power_based'] == energy.calories_from_power(
        200, 300)
    assert route['calories_estimated'] > 0
    assert store.last_payload('r1') == {'duration_seconds': 300}


def test_ingest_payload_coordinates_only():
    store = sync.MemoryRouteStore()
    payload = {'coordinates': [{'latitude': 1, 'longitude': 2}, [3, 4], None],
               'duration_seconds': 600, 'distance': 5}

    result = sync.ingest_activity(store, 'r2', payload=payload)

    assert result.coordinate_count == 2
    assert result.dropped == 1
    rows = store.points['r2']
    assert rows[1] == {'route_id': 'r2', 'sequence_index': 1, 'lat': 3.0,
                       'lng': 4.0, 'elevation': None, 'recorded_at': None,
                       'power': None, 'heart_rate': None, 'cadence': None}
    assert store.routes['r2']['calories_power_based'] is None
    assert store.routes['r2']['calories_estimated'] \
        == energy.calories_from_physics(5, None, 600)


def test_ingest_replaces_points_in_batches():
    calls = []

    class RecordingStore(sync.MemoryRouteStore):
        def replace_route_points(self, route_id, rows):
            rows = list(rows)
            calls.append([len(batch) for batch in rows])
            return super().replace_route_points(route_id, rows)

    store = RecordingStore()
    payload = {'points': [[0, i / 1000] for i in range(250)]}
    sync.ingest_activity(store, 'r3', payload=payload)
    sync.ingest_activity(store, 'r3', payload={'points': [[0, 0]]})

    assert calls == [[100, 100, 50], [1]]
    assert len(store.points['r3']) == 1


def test_ingest_nothing():
    store = sync.MemoryRouteStore()

    result = sync.ingest_activity(store, 'r4', content=b'\x00\x01')

    assert result.coordinate_count == 0
    assert 'r4' not in store.points
    assert store.routes['r4']['calories_estimated'] == 0
