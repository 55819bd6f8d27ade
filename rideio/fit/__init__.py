"""
Decode the Flexible and Interoperable data Transfer (FIT) protocol [1]_.

This is not a complete FIT SDK implementation. It walks the definition and
data records of a file and decodes the "record" messages (GPS position,
altitude, speed, power, heart rate, cadence, distance, temperature) into
trackpoints. Everything else is stepped over.

The reading internals---i.e. the protocol implementation---are in the
`_protocol` module; the field scales and offsets are in `_profile`.


.. [1] https://developer.garmin.com/fit/protocol/

"""
from rideio.fit._reading import decode_fit_file
from rideio.fit._reading import decode_fit_file as decode
from rideio.fit._reading import read_and_format as read
from rideio.fit._reading import gen_records
