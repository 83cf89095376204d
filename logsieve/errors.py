#!/usr/bin/env python
# coding: utf-8


class LogSieveError(Exception):
    pass


class ParseError(LogSieveError):
    """Malformed quoted value, rules file syntax or field attribute."""
    pass


class CompileError(LogSieveError):
    """Rule set cannot be turned into regular expressions."""
    pass


class ValidationError(LogSieveError):
    """A field sample or a rule set sample is not matched.

    Attributes:
        field (str or None): Name of the field whose sample failed.
        sample (str): The sample that failed.
    """

    def __init__(self, message, sample=None, field=None):
        super(ValidationError, self).__init__(message)
        self.sample = sample
        self.field = field


class HandlerError(LogSieveError):
    """The batch handler raised, processing of the file is stopped.

    Attributes:
        marker (Marker or None): Position right after the last batch
            delivered successfully, set by process.process_file.
    """

    def __init__(self, message, marker=None):
        super(HandlerError, self).__init__(message)
        self.marker = marker
