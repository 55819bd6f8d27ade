__version__ = '0.1.0'

from rideio._types import ActivityData, Trackpoint
from rideio.coords import normalize_coordinate, normalize_coordinates
from rideio.energy import estimate_energy
from rideio._util.reader import detect_file_type, read_activity, smart_reader
from rideio._util.exceptions import (
    RideIOError, InvalidFileError, UnsupportedFormatError)
