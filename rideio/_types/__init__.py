from rideio._types.trackpoint import Trackpoint, sequenced
from rideio._types import columns as special_columns
from rideio._types.activitydata import ActivityData
