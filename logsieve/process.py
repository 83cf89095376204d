#!/usr/bin/env python
# coding: utf-8

import logging

from . import marker
from . import ruleset
from .errors import HandlerError

_logger = logging.getLogger(__package__)

BATCH_SIZE = 20
DEFAULT_ENCODING = "utf-8"
DEFAULT_ERRORS = "replace"


class _LineReader:
    """Iterate over lines of a binary file, tracking the byte offset
    just after the last line read."""

    def __init__(self, fileobj, encoding=DEFAULT_ENCODING,
                 errors=DEFAULT_ERRORS):
        self._fileobj = fileobj
        self._encoding = encoding
        self._errors = errors
        self.offset = fileobj.tell()

    def __iter__(self):
        while True:
            raw = self._fileobj.readline()
            if not raw:
                break
            self.offset += len(raw)
            yield raw.decode(self._encoding, errors=self._errors)


def _handle(handler, batch):
    try:
        handler(batch)
    except HandlerError:
        raise
    except Exception as e:
        raise HandlerError("handler failed: {0}".format(e)) from e


def process(rule_sets, lines, handler, batch_size=BATCH_SIZE,
            encoding=DEFAULT_ENCODING, errors=DEFAULT_ERRORS):
    """Hand all lines not matched by any rule set to handler.

    Surrounding whitespace is stripped and empty lines are ignored.
    The remaining lines are collected and given to handler
    in lists of batch_size lines; the last list may be shorter.

    Args:
        rule_sets (list of ruleset.RuleSet): Tried in the given order.
        lines (iterable of str or bytes): Log lines.
        handler (callable): Called with a list of lines.
        batch_size (int, optional): Number of lines per handler call.

    Raises:
        HandlerError: if handler raises. Processing stops immediately,
            batches already handled are not repeated.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be positive")

    batch = []
    for line in lines:
        if isinstance(line, bytes):
            line = line.decode(encoding, errors=errors)
        line = line.strip()
        if line == "":
            continue
        if ruleset.match_any(rule_sets, line):
            continue

        batch.append(line)
        if len(batch) >= batch_size:
            _handle(handler, batch)
            batch = []

    if len(batch) > 0:
        _handle(handler, batch)


def process_file(rule_sets, filename, last, handler, batch_size=BATCH_SIZE,
                 encoding=DEFAULT_ENCODING, errors=DEFAULT_ERRORS):
    """Process a log file starting at the position of the last marker.

    Args:
        rule_sets (list of ruleset.RuleSet)
        filename (str): Log file path.
        last (marker.Marker or None): Marker returned by the previous run.
        handler (callable): See process().

    Returns:
        marker.Marker: Position after the processed data.

    Raises:
        HandlerError: if handler raises, with the marker attribute
            pointing just after the last batch handled successfully.
        OSError: on failures to open, seek or read the file.
    """
    fileobj = open(filename, "rb")
    try:
        marker.seek(last, fileobj)
        reader = _LineReader(fileobj, encoding, errors)
        committed = [reader.offset]

        def _committing_handler(batch):
            handler(batch)
            committed[0] = reader.offset

        try:
            process(rule_sets, reader, _committing_handler,
                    batch_size=batch_size)
        except HandlerError as e:
            fileobj.seek(committed[0])
            e.marker = marker.capture(fileobj)
            raise
        pos = marker.capture(fileobj)
    except Exception:
        try:
            fileobj.close()
        except OSError as close_error:
            _logger.warning("failed to close {0}: {1}".format(
                filename, close_error))
        raise

    fileobj.close()
    return pos
