#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Work out what kind of activity file we've been handed, and decode it.

"""
from collections import namedtuple
from collections.abc import Mapping
from os.path import splitext
from urllib.parse import urlparse
import json
import logging

from rideio import coords, fit, gpx
from rideio.fit._profile import FIT_SIGNATURE
from rideio._util.exceptions import UnsupportedFormatError


logger = logging.getLogger(__name__)

FIT, GPX, JSON = 'fit', 'gpx', 'json'
FORMATS = (FIT, GPX, JSON)

GPX_MARKERS = ('<gpx', '<trk', '<wpt', '<rte')


DecodedActivity = namedtuple(
    'DecodedActivity', ('file_type', 'coordinates', 'trackpoints'))


def _extension(url):
    path = urlparse(url).path or url
    return splitext(path)[-1][1:].lower()   # drop period from the extension


def _as_text(content):
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content).decode('utf-8', 'replace')
    return content


def _as_bytes(content):
    if isinstance(content, str):
        # One char per byte, as if the file had been read in binary.
        return content.encode('latin-1', 'replace')
    return content


def sniff(content):
    """Guess the format from the content itself, or None."""
    if not content:
        return None

    if isinstance(content, (bytes, bytearray, memoryview)):
        head = bytes(content[:12])
        if len(head) == 12 and head[8:12] == FIT_SIGNATURE:
            return FIT
        text = head.decode('latin-1') + _as_text(content[12:4096])
    else:
        if content[8:12] == '.FIT':
            return FIT
        text = content[:4096]

    if any(marker in text for marker in GPX_MARKERS):
        return GPX
    if text.lstrip().startswith('{'):
        return JSON
    return None


def detect_file_type(content, *, file_type=None, url=None):
    """Decide how to decode `content`.

    A declared `file_type` wins, then the extension of `url` (a URL or file
    path), then sniffing the content.

    Returns
    -------
    str or None
        One of ``'fit'``, ``'gpx'``, ``'json'``; None if nothing matched.

    Raises
    ------
    UnsupportedFormatError
        If `file_type` is given but isn't supported.
    """
    if file_type:
        declared = file_type.lower().lstrip('.')
        if declared not in FORMATS:
            raise UnsupportedFormatError(file_type)
        return declared

    if url:
        ext = _extension(url)
        if ext in FORMATS:
            return ext

    return sniff(content)


def read_json_document(content):
    """Points from a ``{"points": [...], "coordinates": [...]}`` document.

    Returns
    -------
    (coordinates, trackpoints)
        Simplified coordinates come from ``coordinates`` when the document
        has them, otherwise from the points.
    """
    try:
        document = json.loads(_as_text(content))
    except ValueError as e:
        logger.warning('not decoding JSON activity data: %s', e)
        return [], []

    if not isinstance(document, Mapping):
        return [], []

    trackpoints = coords.normalize_trackpoints(document.get('points')).items

    if isinstance(document.get('coordinates'), list):
        coordinates = coords.normalize_coordinates(
            document['coordinates']).items
    else:
        coordinates = coords.to_coordinates(trackpoints)

    return coordinates, trackpoints


def read_activity(content, *, file_type=None, url=None, strict=False,
                  **kwargs):
    """Decode an activity file of any supported format.

    Parameters
    ----------
    content : bytes or str
        The downloaded file. FIT needs the raw bytes; text formats may be
        either.
    file_type : str, optional
        ``'fit'``, ``'gpx'`` or ``'json'``; inferred when not given.
    url : str, optional
        Where the file came from (used for its extension only).
    strict : bool, optional
        Raise `UnsupportedFormatError` when the format can't be determined,
        instead of returning no points.
    **kwargs
        Passed on to the FIT decoder (``max_records``, ``now``).

    Returns
    -------
    DecodedActivity
    """
    fmt = detect_file_type(content, file_type=file_type, url=url)

    if fmt == FIT:
        trackpoints = fit.decode_fit_file(_as_bytes(content), **kwargs)
        coordinates = coords.to_coordinates(trackpoints)
    elif fmt == GPX:
        text = _as_text(content)
        coordinates = gpx.extract_coordinates(text)
        trackpoints = gpx.extract_trackpoints(text)
    elif fmt == JSON:
        coordinates, trackpoints = read_json_document(content)
    elif strict:
        raise UnsupportedFormatError()
    else:
        logger.warning('could not determine the activity file format')
        coordinates, trackpoints = [], []

    logger.info('read %d coordinates and %d trackpoints (%s)',
                len(coordinates), len(trackpoints), fmt)
    return DecodedActivity(fmt, coordinates, trackpoints)


def smart_reader(file_path, *, file_type=None, **kwargs):
    """Read and decode an activity file from disk.

    The format is taken from `file_type`, else the file extension, else the
    content.
    """
    with open(file_path, 'rb') as f:
        content = f.read()
    return read_activity(content, file_type=file_type, url=file_path,
                         **kwargs)
