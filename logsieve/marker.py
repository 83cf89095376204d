#!/usr/bin/env python
# coding: utf-8

"""
Position of the last processed byte in a log file.

A marker holds the file identity (inode number) and a byte offset.
Seeking with a marker falls back to the beginning of the file
if the file was replaced (rotated) or truncated in the meantime.
On platforms without inode numbers the identity is 0,
and only truncation is detected.
"""

import os
import json
import logging
from collections import namedtuple

_logger = logging.getLogger(__package__)

STATE_SUFFIX = ".pos"


class Marker(namedtuple("Marker", ["inode", "offset"])):
    """Immutable (inode, offset) pair, Marker() is the null marker."""

    __slots__ = ()

    def __new__(cls, inode=0, offset=0):
        return super(Marker, cls).__new__(cls, int(inode), int(offset))

    def is_zero(self):
        return self.inode == 0 and self.offset == 0

    def to_dict(self):
        return {"inode": self.inode, "offset": self.offset}

    @classmethod
    def from_dict(cls, d):
        try:
            inode = d["inode"]
            offset = d["offset"]
        except (KeyError, TypeError) as e:
            raise ValueError("invalid marker record {0!r}".format(d)) from e
        for val in (inode, offset):
            if isinstance(val, bool) or not isinstance(val, int) or val < 0:
                raise ValueError("invalid marker record {0!r}".format(d))
        return cls(inode, offset)


def _file_inode(fileobj):
    st = os.fstat(fileobj.fileno())
    return st, st.st_ino


def capture(fileobj):
    """Return a Marker for the current position of an open file."""
    offset = fileobj.tell()
    _, inode = _file_inode(fileobj)
    return Marker(inode, offset)


def is_new_file(marker, fileobj):
    """Return True if fileobj is not the file the marker was taken on,
    or the file was truncated below the marker offset."""
    st, inode = _file_inode(fileobj)
    if marker.inode != 0 and inode != 0 and inode != marker.inode:
        return True
    if st.st_size < marker.offset:
        return True
    return False


def seek(marker, fileobj):
    """Move fileobj to the position of the marker.

    The null marker (or None) leaves the file where it is.
    If the file was rotated or truncated, seek to the beginning.

    Returns:
        int: the new position
    """
    if marker is None or marker.is_zero():
        return fileobj.tell()

    offset = marker.offset
    if is_new_file(marker, fileobj):
        _logger.info("{0} rotated or truncated, read from the beginning".format(
            getattr(fileobj, "name", fileobj)))
        offset = 0
    return fileobj.seek(offset, os.SEEK_SET)


def state_filename(logfile):
    """Return the state file name for a log file path."""
    path = os.path.abspath(logfile)
    return path.replace(os.sep, ".") + STATE_SUFFIX


def state_path(state_dir, logfile):
    return os.path.join(state_dir, state_filename(logfile))


def load_marker(state_dir, logfile):
    """Return the marker saved for logfile, or Marker() if there is none.

    Raises:
        ValueError: if the state file is broken.
    """
    fp = state_path(state_dir, logfile)
    _logger.debug("trying to load position from state file {0}".format(fp))
    if not os.path.exists(fp):
        _logger.info("last position for {0} not found".format(logfile))
        return Marker()

    with open(fp, "r", encoding="utf-8") as f:
        return Marker.from_dict(json.load(f))


def save_marker(state_dir, logfile, marker):
    fp = state_path(state_dir, logfile)
    _logger.debug("saving position to state file {0}".format(fp))
    os.makedirs(state_dir, exist_ok=True)

    temp_fp = fp + ".tmp"
    with open(temp_fp, "w", encoding="utf-8") as f:
        json.dump(marker.to_dict(), f)
        f.write("\n")
    os.replace(temp_fp, fp)
