#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pull points out of GPX text with regular expressions.

This is not an XML parser: GPS exports are assumed to be
well-formed enough that a point is an element with ``lat`` and ``lon``
attributes, and anything that isn't one is passed over rather than
raising. Track points win; waypoints are used only when there are no
track points, and route points only when there are neither.

"""
import logging
import re

from rideio import coords
from rideio._types import ActivityData


logger = logging.getLogger(__name__)

POINT_TAGS = ('trkpt', 'wpt', 'rtept')   # in order of preference

_PREFIX = r'(?:[\w.-]+:)?'     # tolerate namespace prefixes


def _element_pattern(tag):
    return re.compile(
        r'<{p}{tag}\b([^>]*?)(?:/>|>(.*?)</{p}{tag}\s*>)'.format(
            p=_PREFIX, tag=tag),
        re.DOTALL)


def _opening_tag_pattern(tag):
    return re.compile(r'<{p}{tag}\b([^>]*?)/?>'.format(p=_PREFIX, tag=tag))


def _attribute_pattern(name):
    return re.compile(r'(?<![\w:-]){}\s*=\s*["\']([^"\']*)["\']'.format(name))


def _child_pattern(name):
    return re.compile(
        r'<{p}{name}\b[^>]*>\s*([^<]*?)\s*</{p}{name}\s*>'.format(
            p=_PREFIX, name=name),
        re.IGNORECASE)


ELEMENTS = {tag: _element_pattern(tag) for tag in POINT_TAGS}
OPENING_TAGS = {tag: _opening_tag_pattern(tag) for tag in POINT_TAGS}

LAT = _attribute_pattern('lat')
LON = _attribute_pattern('lon')

# point mapping key --> child element(s), first match wins
CHILDREN = {
    'elevation': (_child_pattern('ele'),),
    'timestamp': (_child_pattern('time'),),
    # Garmin TrackPointExtension and friends
    'heart_rate': (_child_pattern('hr'), _child_pattern('heartrate')),
    'cadence': (_child_pattern('cad'), _child_pattern('cadence')),
    'power': (_child_pattern('power'), _child_pattern('watts')),
    'temperature': (_child_pattern('atemp'),),
}


def _attribute(pattern, attributes):
    match = pattern.search(attributes)
    return match.group(1) if match else None


def _child_text(patterns, content):
    for pattern in patterns:
        match = pattern.search(content)
        if match and match.group(1):
            return match.group(1)
    return None


def format_point(attributes, content=None):
    """Attribute text (and inner content) of a point element --> mapping."""
    point = {'lat': _attribute(LAT, attributes),
             'lon': _attribute(LON, attributes)}
    if content:
        for key, patterns in CHILDREN.items():
            point[key] = _child_text(patterns, content)
        if coords.to_number(point['elevation']) is None:
            point['elevation'] = None   # "ele" that isn't a number
    return point


def gen_records(text, *, detailed=True):
    """Generator function for iterating over the points of a GPX document.

    "Records" are dictionary objects representing a single point, with
    text values straight from the document. Only the first of ``trkpt``,
    ``wpt`` and ``rtept`` that has any valid point is used.
    """
    if not text:
        return

    patterns = ELEMENTS if detailed else OPENING_TAGS
    for tag in POINT_TAGS:
        found = False
        for match in patterns[tag].finditer(text):
            content = match.group(2) if detailed else None
            point = format_point(match.group(1), content)
            if coords.normalize_coordinate(point) is not None:
                found = True
            yield point
        if found:
            return


def extract_coordinates(text):
    """``[(lat, lng), ...]`` for map display.

    Cheaper than `extract_trackpoints`: only opening tags are looked at.
    Empty or unrecognisable text gives an empty list.
    """
    batch = coords.normalize_coordinates(gen_records(text, detailed=False))
    if batch.dropped:
        logger.info('dropped %d GPX points without a usable position',
                    batch.dropped)
    return batch.items


def extract_trackpoints(text):
    """Trackpoints with elevation, time and any extension sensor values.

    Attributes the point doesn't carry are None. Empty or unrecognisable
    text gives an empty list.
    """
    batch = coords.normalize_trackpoints(gen_records(text, detailed=True))
    if batch.dropped:
        logger.info('dropped %d GPX points without a usable position',
                    batch.dropped)
    return batch.items


def read_and_format(text):
    """Decode GPX text into an `ActivityData` table."""
    return ActivityData.from_trackpoints(extract_trackpoints(text))
