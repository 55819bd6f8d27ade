#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
parse is installed as an executable console_script with this package.

"""
from argparse import ArgumentParser
import logging
import sys

from rideio._types import ActivityData
from rideio._util.exceptions import RideIOError
from rideio._util.reader import FORMATS, smart_reader
from rideio.config import get_settings


def parse(argv=None):

    # Argument handling
    parser = ArgumentParser(description='decode a ride file')

    parser.add_argument('input',
                        type=str,
                        help='FIT, GPX or JSON file to read')
    parser.add_argument('--output',
                        type=str,
                        metavar='filename',
                        default=None,
                        help='optional; CSV file to write to')
    parser.add_argument('--format',
                        type=str,
                        default=None,
                        help='optional; format of the file',
                        choices=FORMATS)
    parser.add_argument('--energy',
                        action='store_true',
                        help='also print an energy estimate')
    parser.add_argument('--mass',
                        type=float,
                        metavar='kg',
                        default=None,
                        help='optional; rider mass for the energy estimate')

    args = parser.parse_args(argv)

    logging.basicConfig(level=get_settings().log_level.upper(),
                        format='%(levelname)s %(name)s: %(message)s')

    # Script begins
    try:
        decoded = smart_reader(args.input, file_type=args.format)
    except (OSError, RideIOError) as e:
        print('rideio: {}'.format(e), file=sys.stderr)
        return 1

    data = ActivityData.from_trackpoints(decoded.trackpoints)

    if args.energy:
        summary = data.energy(rider_mass_kg=args.mass)
        for field, value in summary._asdict().items():
            print('{}: {}'.format(field, value))
        return 0

    write = data.to_csv
    if args.output is None:
        print(write(na_rep='NA'))
    else:
        write(args.output, na_rep='NA', encoding='utf-8')

    return 0


if __name__ == '__main__':
    sys.exit(parse())
