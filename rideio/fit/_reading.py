#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Translate the `_protocol` module functionality to be consistent with
this package's API: record messages become trackpoints.

"""
from datetime import datetime, timedelta
import logging

import pytz

from rideio import coords
from rideio.config import get_settings
from rideio.fit._profile import FIT_EPOCH, RECORD_FIELDS, RECORD_MESG_NUM
from rideio.fit._protocol import (
    DataMessage, FitFile, gen_fit_messages, read_file_header)
from rideio._types import ActivityData, sequenced
from rideio._util.exceptions import RideIOError


logger = logging.getLogger(__name__)

# FIT profile name --> key understood by `rideio.coords`
POINT_KEYS = {
    'position_lat': 'lat',
    'position_long': 'lng',
    'altitude': 'elevation',
    'heart_rate': 'heart_rate',
    'cadence': 'cadence',
    'distance': 'distance',
    'speed': 'speed',
    'power': 'power',
    'temperature': 'temperature',
}


def decode_record(message):
    """Apply the record profile to a data message.

    Returns
    -------
    dict
        Profile field name --> scaled value, for the fields that were
        present. Unknown field numbers are ignored.
    """
    decoded = {}
    for number, raw in message.raw_values().items():
        profile = RECORD_FIELDS.get(number)
        if profile is None:
            continue
        value = profile.apply(raw)
        if value is not None:
            decoded[profile.name] = value
    return decoded


def fit_timestamp(seconds):
    """FIT time (seconds since 1989-12-31T00:00:00Z) --> aware datetime."""
    return FIT_EPOCH + timedelta(seconds=seconds)


def format_record(record):
    """Profile names --> the point mapping handed to the normalizer."""
    point = {POINT_KEYS[name]: value for name, value in record.items()
             if name in POINT_KEYS}
    if 'timestamp' in record:
        point['timestamp'] = fit_timestamp(record['timestamp'])
    return point


def gen_records(fitfile, *, max_records=None):
    """Generator function for iterating over decoded record messages.

    "Records" are dictionary objects representing a single sample of data,
    keyed by FIT profile field name. Only global message 20 ("record") is
    decoded; everything else just moves the cursor along.

    `fitfile` is either raw bytes (the header is read here, and may raise
    `InvalidFileError`) or a `FitFile` whose header has been read.
    """
    if not isinstance(fitfile, FitFile):
        fitfile = FitFile(fitfile)
        read_file_header(fitfile)
    if max_records is None:
        max_records = get_settings().max_fit_records

    for message in gen_fit_messages(fitfile, max_records=max_records):
        if (isinstance(message, DataMessage)
                and message.global_mesg_num == RECORD_MESG_NUM):
            yield decode_record(message)


def backfill_timestamps(trackpoints, *, now=None):
    """Synthesize timestamps for files that don't record them.

    Only applies when the first point has no timestamp: each point without
    one gets the current time plus one second per position in the list.
    """
    if not trackpoints or trackpoints[0].timestamp is not None:
        return trackpoints

    base = (now or datetime.now(pytz.utc)).replace(microsecond=0)
    for i, trackpoint in enumerate(trackpoints):
        if trackpoint.timestamp is None:
            trackpoint.timestamp = coords.normalize_timestamp(
                base + timedelta(seconds=i))
    return trackpoints


def decode_fit_file(data, *, max_records=None, now=None):
    """Decode the GPS trackpoints of a FIT file.

    Parameters
    ----------
    data : bytes-like
        The whole file.
    max_records : int, optional
        Record-count ceiling; defaults to the ``max_fit_records`` setting.
    now : datetime, optional
        Base time for synthesized timestamps (see `backfill_timestamps`).

    Returns
    -------
    list of Trackpoint
        In file order, numbered from 0. Records without a valid position
        are left out. A buffer that isn't a FIT file gives an empty list.
    """
    fitfile = FitFile(data)
    try:
        read_file_header(fitfile)
    except RideIOError as e:
        logger.warning('not decoding FIT data: %s', e)
        return []

    trackpoints = []
    dropped = 0
    for record in gen_records(fitfile, max_records=max_records):
        trackpoint = coords.normalize_trackpoint(format_record(record))
        if trackpoint is None:
            dropped += 1
        else:
            trackpoints.append(trackpoint)

    logger.info('decoded %d trackpoints from %d FIT records '
                '(protocol %s, profile %s; %d without a position, '
                'skipped %s)',
                len(trackpoints), fitfile.records_read,
                fitfile.protocol_version, fitfile.profile_version, dropped,
                dict(fitfile.skipped) or 'nothing')

    return backfill_timestamps(sequenced(trackpoints), now=now)


def read_and_format(data, **kwargs):
    """Decode a FIT file into an `ActivityData` table."""
    return ActivityData.from_trackpoints(decode_fit_file(data, **kwargs))
