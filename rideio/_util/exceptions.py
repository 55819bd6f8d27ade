#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exceptions for this package.

"""


class RideIOError(Exception):
    """Base exception."""
    _default_message = ''

    def __init__(self, message=None):
        super().__init__(message if message else self._default_message)


class InvalidFileError(RideIOError):
    def __init__(self, fmt, detail=None):
        determiner = 'an' if fmt[0] in ('aeiou' + 's') else 'a'  # grammar
        message = "this doesn't look like %s %s file!" % (determiner, fmt)
        if detail:
            message += ' (%s)' % detail
        super().__init__(message)
        self.fmt = fmt


class UnsupportedFormatError(RideIOError):
    def __init__(self, fmt=None):
        if fmt is None:
            message = 'could not determine the file format'
        else:
            message = '%r is not a supported file format' % fmt
        super().__init__(message)


# Exceptions specific to the fit subpackage
# -----------------------------------------
class FITFileHeaderError(RideIOError):
    pass


class FITMessageHeaderError(RideIOError):
    pass
