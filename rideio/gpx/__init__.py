"""
Extract points from GPS Exchange Format (GPX) documents.

Track points (``trkpt``) are preferred, then waypoints (``wpt``), then route
points (``rtept``). See `_reading` for the details.

"""
from rideio.gpx._reading import extract_coordinates, extract_trackpoints
from rideio.gpx._reading import read_and_format as read
from rideio.gpx._reading import gen_records
