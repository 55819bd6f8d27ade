#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest
import pytz

from rideio import coords
from rideio._types import Trackpoint


@pytest.mark.parametrize('value', [
    [51.5, -0.12],
    (51.5, -0.12, 30),
    np.array([51.5, -0.12]),
    {'lat': 51.5, 'lng': -0.12},
    {'lat': '51.5', 'lon': '-0.12'},
    {'latitude': 51.5, 'longitude': -0.12},
    {'latitude': 51.5, 'lng': -0.12, 'lon': 99},      # lng before lon
    {'position': [51.5, -0.12]},
    {'latlng': {'lat': 51.5, 'lng': -0.12}, 'time': 'x'},
    Trackpoint(51.5, -0.12),
])
def test_recognised_shapes(value):
    assert coords.normalize_coordinate(value) == (51.5, -0.12)


@pytest.mark.parametrize('value', [
    None,
    51.5,
    '51.5,-0.12',
    [51.5],
    [],
    [91, 0],
    [-90.0001, 0],
    [0, 180.5],
    [float('nan'), 0],
    [float('inf'), 0],
    [True, False],
    ['north', 'west'],
    {'lng': 1},
    {'lat': 1},
    {'lat': None, 'lng': 2},
    {'position': 'somewhere'},
    {'a': {'b': 1}},
])
def test_rejected(value):
    assert coords.normalize_coordinate(value) is None


def test_boundaries_are_valid():
    assert coords.normalize_coordinate([90, 180]) == (90.0, 180.0)
    assert coords.normalize_coordinate([-90, -180]) == (-90.0, -180.0)


def test_idempotent():
    for value in ([1, 2], {'latitude': '3', 'lon': 4}, {'position': [5, 6]}):
        once = coords.normalize_coordinate(value)
        assert coords.normalize_coordinate(once) == once


def test_nesting_is_bounded():
    value = [10, 20]
    for __ in range(coords.MAX_NESTING):
        value = {'position': value}
    assert coords.normalize_coordinate(value) == (10.0, 20.0)
    assert coords.normalize_coordinate({'position': value}) is None


def test_with_elevation():
    assert coords.normalize_coordinate([1, 2, '30.5'], with_elevation=True) \
        == (1.0, 2.0, 30.5)
    assert coords.normalize_coordinate({'lat': 1, 'lng': 2, 'ele': 'x'},
                                       with_elevation=True) == (1.0, 2.0, None)
    assert coords.normalize_coordinate({'position': [1, 2], 'altitude': 7},
                                       with_elevation=True) == (1.0, 2.0, 7.0)


def test_batch_keeps_order_and_counts_drops():
    batch = coords.normalize_coordinates(
        [[1, 2], None, {'lat': 3, 'lng': 4}, [100, 0], 'x', (5, 6)])

    assert batch.items == [(1.0, 2.0), (3.0, 4.0), (5.0, 6.0)]
    assert batch.dropped == 3
    assert coords.normalize_coordinates(None) == ([], 0)


def test_timestamps():
    aware = datetime(2020, 5, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    assert coords.normalize_timestamp(aware) == '2020-05-01T12:00:00Z'
    assert coords.normalize_timestamp(datetime(2020, 5, 1)) \
        == '2020-05-01T00:00:00Z'
    assert coords.normalize_timestamp(pytz.utc.localize(
        datetime(2020, 5, 1, 1, 2, 3))) == '2020-05-01T01:02:03Z'
    assert coords.normalize_timestamp(' 2020-05-01T00:00:00Z ') \
        == '2020-05-01T00:00:00Z'
    assert coords.normalize_timestamp('  ') is None
    assert coords.normalize_timestamp(12345) is None


def test_trackpoint_sensor_fields():
    tp = coords.normalize_trackpoint({
        'position': {'lat': 1, 'lng': 2},
        'ele': 5, 'time': '2020-01-01T00:00:00Z',
        'watts': 200.4, 'heartRate': '150', 'cad': 89.5,
        'speed': '7.25', 'distance': 1000, 'temp': 18,
    })

    assert tp.coordinate == (1.0, 2.0)
    assert tp.elevation == 5.0
    assert tp.timestamp == '2020-01-01T00:00:00Z'
    assert tp.power == 200
    assert tp.heart_rate == 150
    assert tp.cadence == 90     # halves round up
    assert tp.speed == 7.25
    assert tp.distance == 1000.0
    assert tp.temperature == 18
    assert tp.sequence_index is None


def test_trackpoint_from_trackpoint():
    original = Trackpoint(1.0, 2.0, elevation=3.0, power=100,
                          timestamp='2020-01-01T00:00:00Z')
    assert coords.normalize_trackpoint(original) == original


def test_trackpoint_batch():
    batch = coords.normalize_trackpoints([[0, 0], [200, 0], [1, 1, 5]])

    assert [tp.sequence_index for tp in batch.items] == [0, 1]
    assert batch.items[1].elevation == 5.0
    assert batch.dropped == 1
    assert coords.to_coordinates(batch.items) == [(0.0, 0.0), (1.0, 1.0)]
