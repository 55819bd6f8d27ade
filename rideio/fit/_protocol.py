#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Implement enough of the Flexible and Interoperable data Transfer (FIT)
protocol to walk a file's records.

The decoder is best-effort: it works on an in-memory buffer, and any
record it cannot make sense of is skipped (usually one byte at a time)
with a reason attached, rather than aborting the whole file.

Known gaps
----------
    + compressed timestamp headers are recognised but not decoded
    + developer data fields are stepped over, never read
    + only numeric base types are read; arrays and strings are skipped

"""
from collections import Counter, namedtuple
from struct import error as StructError, unpack_from
import logging

from rideio.fit._profile import FIT_SIGNATURE, GLOBAL_MESG_NUMS
from rideio._util.binary import get_base_type, read_value
from rideio._util.exceptions import (
    FITFileHeaderError, FITMessageHeaderError, InvalidFileError)


logger = logging.getLogger(__name__)

MIN_HEADER_SIZE = 12
CRC_SIZE = 2

# Skip reasons
UNDEFINED_LOCAL_TYPE = 'undefined_local_type'
COMPRESSED_TIMESTAMP = 'compressed_timestamp'
PARSE_ERROR = 'parse_error'
TRUNCATED = 'truncated'
RECORD_CEILING = 'record_ceiling'


Step = namedtuple('Step', ('message', 'size', 'skip_reason'))
"""Outcome of reading at the cursor.

A message and its size in bytes; or no message, a size of 1 (resync by one
byte) and the reason.
"""


def skip(reason):
    return Step(None, 1, reason)


class FitFile:
    """A cursor over an in-memory *.fit byte stream.

    Attributes
    ----------
    data : bytes
        The whole file.
    offset : int
        Position of the next record header.
    end : int
        Position just past the last record byte (i.e. before the CRC).
    local_messages : dict
        Definition messages currently in force, keyed by local message
        type (0-15).
    records_read : int
        Records (or one-byte skips) consumed so far.
    skipped : collections.Counter
        Skip reason --> count.
    stopped : str or None
        Why decoding ended early, if it did.
    profile_version, protocol_version : float
        File version information taken from the file header.
    """
    def __init__(self, data):
        self.data = bytes(data)
        self.offset = 0
        self.end = len(self.data)
        self.local_messages = {}
        self.records_read = 0
        self.skipped = Counter()
        self.stopped = None
        self.protocol_version = self.profile_version = None

    def set_version_info(self, version_info):
        """Decode version info the same way the FIT SDK does.

        Version info is a byte and a short unpacked from the file header.
        """
        prot, prof = version_info
        self.protocol_version = float(
            '{:.0f}.{:.0f}'.format(prot >> 4, prot & ((1 << 4) - 1)))
        self.profile_version = float(
            '{:.0f}.{:.0f}'.format(prof // 100, prof % 100))

    def fits(self, size):
        """Whether `size` bytes from the cursor stay within the records."""
        return self.offset + size <= self.end


class NormalHeader:
    """From the FIT SDK

    Normal Header Bit Field Description
    -----------------------------------

    =====  =============  ========================
    Bit        Value      Description
    =====  =============  ========================
      7          0        Normal header
      6        0 or 1     Message type:
                            1: definition message
                            0: data message
      5     0 (default)   Developer data flag
                          (definition messages)
      4          0        Reserved
     0-3        0-15      Local message type
    =====  =============  ========================
    """
    __slots__ = ('is_definition', 'has_developer_data', 'local_message_type')

    def __init__(self, header_byte):
        self.is_definition = bool(header_byte & 0x40)
        self.has_developer_data = self.is_definition and bool(header_byte & 0x20)
        # `local_message_type` is the key (int) for the definition
        # associated with this message
        self.local_message_type = header_byte & 0xF    # bits 0-3


def is_compressed_timestamp(header_byte):
    """Bit 7 set: a compressed timestamp header (data messages only)."""
    return bool(header_byte & 0x80)


class FieldDefinition:
    """From the FIT SDK

    Field Definition Contents
    -------------------------

    ======  =================  ===============================================
     Byte    Name               Description
    ======  =================  ===============================================
      0     Field definition   Defined in the global FIT profile for the
            number             specified FIT message.
      1     Size               Size (in bytes) of the specified FIT message's
                               field.
      2     Base type          Base type of the specified FIT message's field.
    ======  =================  ===============================================

    """
    __slots__ = ('number', 'size', 'base_type', 'endian')

    def __init__(self, number, size, base_type_tag, endian='<'):
        self.number = number
        self.size = size
        self.base_type = get_base_type(base_type_tag)   # None if unsupported
        self.endian = endian

    def __repr__(self):
        return 'FieldDefinition(%d, size=%d, %r)' % (
            self.number, self.size, self.base_type)

    @classmethod
    def _from_bytes(cls, data, offset, endian):
        # NOTE: single bytes, so no need to apply endianness here.
        return cls(*unpack_from('<3B', data, offset), endian=endian)

    def read(self, data, offset):
        """The raw value at `offset`, or None if missing or unreadable."""
        if self.base_type is None:
            return None
        value = read_value(data, offset, self.size, self.base_type,
                           endian=self.endian)
        if value is None or self.base_type.is_invalid(value):
            return None
        return value


class DefinitionMessage:
    """From the FIT SDK

    The definition message is used to create an association between the
    local message type contained in the record header, and a Global Message
    Number that relates to the global FIT message.


    Definition Message Contents
    ---------------------------

    ======  =======================  =============  ===========================
    Byte    Description                 Length      Value
    (bytes)
    ======  =======================  =============  ===========================
      0     Reserved                       1         0
      1     Architecture                   1         0 or 1
                                                       0: little endian
                                                       1: big endian
     2-3    Global message number          2         Unique to each message
      4     Fields                         1         Number of fields in the
                                                     data message
      5     Field definition(s)            3         See FieldDefinition
     ...                              (per field)
    ======  =======================  =============  ===========================

    When the developer data flag is set, a count byte and 3-byte developer
    field descriptors follow. Only their sizes are kept.
    """
    __slots__ = ('header', 'global_mesg_num', 'name', 'field_defs',
                 'developer_data_size')

    def __init__(self, header, global_mesg_num, field_defs,
                 developer_data_size=0):
        self.header = header
        self.global_mesg_num = global_mesg_num
        self.name = GLOBAL_MESG_NUMS.get(global_mesg_num, 'unknown')
        self.field_defs = field_defs
        self.developer_data_size = developer_data_size

    @property
    def local_message_type(self):
        return self.header.local_message_type

    @property
    def data_size(self):
        """Bytes of content in each data message using this definition."""
        return (sum(field_def.size for field_def in self.field_defs)
                + self.developer_data_size)


class DataMessage:
    """The useful part of a *.fit file.

    Values are read lazily from the file buffer using the field definitions
    of the associated definition message.
    """
    __slots__ = ('definition', 'data', 'offset')

    def __init__(self, definition, data, offset):
        self.definition = definition
        self.data = data
        self.offset = offset     # first content byte, after the header

    @property
    def name(self):
        return self.definition.name

    @property
    def global_mesg_num(self):
        return self.definition.global_mesg_num

    def raw_values(self):
        """Field definition number --> raw value (None when invalid)."""
        values = {}
        offset = self.offset
        for field_def in self.definition.field_defs:
            values[field_def.number] = field_def.read(self.data, offset)
            offset += field_def.size
        return values


def read_file_header(fitfile):
    """Read the *.fit file header, modifying `fitfile` in place.

    Attributes set on `fitfile`:
        + version info (protocol_version and profile_version)
        + offset, moved to the start of the first record header
        + end of the record data

    Raises
    ------
    InvalidFileError
        If the buffer is too short or the ".FIT" signature is missing.
    FITFileHeaderError
        If the declared header size doesn't make sense.
    """
    data = fitfile.data
    if len(data) < MIN_HEADER_SIZE:
        raise InvalidFileError('fit', 'only %d bytes' % len(data))

    if data[8:12] != FIT_SIGNATURE:
        raise InvalidFileError('fit', 'signature is %r' % data[8:12])

    # Larger fields are explicitly little endian from SDK.
    header_size, *version_info, data_size = unpack_from('<2BHI', data, 0)
    if header_size < MIN_HEADER_SIZE or header_size > len(data):
        raise FITFileHeaderError(
            'irregular file header size (%d)' % header_size)
    fitfile.set_version_info(version_info)

    fitfile.offset = header_size
    records_end = header_size + data_size
    if data_size and records_end <= len(data):
        fitfile.end = records_end
    elif data_size:
        fitfile.end = len(data)              # truncated file, no CRC
    else:
        fitfile.end = len(data) - CRC_SIZE   # size not filled in


def read_definition(fitfile, header):
    data, offset = fitfile.data, fitfile.offset
    if not fitfile.fits(6):
        return skip(TRUNCATED)

    __, architecture, = unpack_from('<2B', data, offset + 1)  # ignore reserved
    if architecture not in (0, 1):
        raise FITMessageHeaderError(
            'invalid architecture byte (%d)' % architecture)
    endian = '>' if architecture else '<'

    global_mesg_num, field_count = unpack_from(endian + 'HB', data, offset + 3)
    size = 6 + field_count * 3

    developer_data_size = 0
    if header.has_developer_data:
        if not fitfile.fits(size + 1):
            return skip(TRUNCATED)
        dev_count = data[offset + size]
        dev_start = offset + size + 1
        size += 1 + dev_count * 3
        if not fitfile.fits(size):
            return skip(TRUNCATED)
        developer_data_size = sum(data[dev_start + i * 3 + 1]
                                  for i in range(dev_count))

    if not fitfile.fits(size):
        return skip(TRUNCATED)

    field_defs = [FieldDefinition._from_bytes(data, offset + 6 + i * 3, endian)
                  for i in range(field_count)]
    message = DefinitionMessage(header, global_mesg_num, field_defs,
                                developer_data_size)

    # Supersede whatever used this slot before.
    fitfile.local_messages[header.local_message_type] = message
    return Step(message, size, None)


def read_data(fitfile, header):
    definition = fitfile.local_messages.get(header.local_message_type)
    if definition is None:
        return skip(UNDEFINED_LOCAL_TYPE)

    size = 1 + definition.data_size
    if not fitfile.fits(size):
        return skip(TRUNCATED)

    return Step(DataMessage(definition, fitfile.data, fitfile.offset + 1),
                size, None)


def read_fit_message(fitfile):
    """Parse a message (header + contents) at the cursor.

    Returns
    -------
    Step
        The cursor is *not* moved; that's up to the caller.
    """
    header_byte = fitfile.data[fitfile.offset]
    if is_compressed_timestamp(header_byte):
        return skip(COMPRESSED_TIMESTAMP)

    header = NormalHeader(header_byte)
    if header.is_definition:
        return read_definition(fitfile, header)
    else:
        return read_data(fitfile, header)


def gen_fit_messages(fitfile, *, max_records):
    """Generator function for iterating over *.fit file messages.

    The file header must have been read already (see `read_file_header`).

    Parameters
    ----------
    fitfile : FitFile
        Progress and skip counts are recorded on this as we go.
    max_records : int
        Stop after this many records (or one-byte skips), so corrupt input
        can't keep us busy forever.

    Yields
    ------
    DefinitionMessage or DataMessage
    """
    while fitfile.offset < fitfile.end:
        if fitfile.records_read >= max_records:
            logger.warning('stopping after %d records (ceiling reached)',
                           max_records)
            fitfile.stopped = RECORD_CEILING
            return
        fitfile.records_read += 1

        try:
            step = read_fit_message(fitfile)
        except (FITMessageHeaderError, StructError, IndexError) as e:
            logger.debug('cannot parse record at offset %d: %s',
                         fitfile.offset, e)
            step = skip(PARSE_ERROR)

        if step.skip_reason is not None:
            if (step.skip_reason == COMPRESSED_TIMESTAMP
                    and not fitfile.skipped[COMPRESSED_TIMESTAMP]):
                logger.warning('compressed timestamp headers are not '
                               'supported; skipping them')
            fitfile.skipped[step.skip_reason] += 1
            logger.debug('skipping byte at offset %d (%s)',
                         fitfile.offset, step.skip_reason)

        fitfile.offset += step.size

        if step.message is not None:
            yield step.message
