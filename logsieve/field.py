#!/usr/bin/env python
# coding: utf-8

import re
import logging

from . import quote
from .errors import ParseError, CompileError, ValidationError

_logger = logging.getLogger(__package__)

FIELD_ATTRIBUTES = ("pattern", "template", "samples")


def match_fullspan(reobj, s):
    """Return True if the first match of reobj in s covers the whole of s.

    The leftmost match found by the regex engine is used,
    a later or longer alternative is never tried.
    """
    matchobj = reobj.search(s)
    if matchobj is None:
        return False
    return matchobj.start() == 0 and matchobj.end() == len(s)


def check_fullspan(reobj, s):
    """Return None if reobj fully matches s, otherwise a description."""
    matchobj = reobj.search(s)
    if matchobj is None:
        return "pattern {0!r} does not match {1!r}".format(reobj.pattern, s)
    elif matchobj.start() != 0:
        return ("pattern {0!r} does not match {1!r} at the beginning, "
                "match: {2!r}".format(reobj.pattern, s, matchobj.group()))
    elif matchobj.end() != len(s):
        return ("pattern {0!r} does not match {1!r} until the end, "
                "match: {2!r}".format(reobj.pattern, s, matchobj.group()))
    else:
        return None


class Field:
    """A variable part of a log message.

    Attributes:
        name (str): Field name.
        template (str): Placeholder text as it appears in templates.
        pattern (re.Pattern): Regular expression for the variable part.
        samples (tuple of str): Strings the pattern must fully match.
    """

    def __init__(self, name, template, pattern, samples=None):
        self.name = name
        self.template = template
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        self.pattern = pattern
        if samples is None:
            self.samples = tuple()
        else:
            self.samples = tuple(samples)

    def __repr__(self):
        return "Field({0!r}, template={1!r}, pattern={2!r})".format(
            self.name, self.template, self.pattern.pattern)

    def __eq__(self, other):
        if not isinstance(other, Field):
            return NotImplemented
        return (self.name == other.name and
                self.template == other.template and
                self.samples == other.samples and
                self.pattern.pattern == other.pattern.pattern)

    def __hash__(self):
        return hash((self.name, self.template, self.pattern.pattern))

    def check(self):
        """Raise ValidationError if a sample is not fully matched."""
        for sample in self.samples:
            mes = check_fullspan(self.pattern, sample)
            if mes is not None:
                raise ValidationError("field {0}: {1}".format(self.name, mes),
                                      sample=sample, field=self.name)


def compile_field(name, raw_attrs):
    """Make a Field from raw (still quoted) attribute values.

    Args:
        name (str): Field name.
        raw_attrs (dict): attribute name -> raw value,
            keys are pattern, template and samples.

    Returns:
        Field

    Raises:
        ParseError: on an unknown attribute or a malformed value.
        CompileError: if the pattern is missing or invalid.
    """
    pattern = None
    template = ""
    samples = []
    for key, value in raw_attrs.items():
        if key == "pattern":
            pattern = quote.unquote_string(value)
        elif key == "template":
            template = quote.unquote_string(value)
        elif key == "samples":
            samples = quote.unquote_list(value)
        else:
            raise ParseError("unknown key {0!r} in field {1!r}".format(
                key, name))

    if pattern is None:
        raise CompileError("field {0!r} has no pattern".format(name))
    try:
        reobj = re.compile(pattern)
    except re.error as e:
        raise CompileError("invalid pattern {0!r} in field {1!r}: {2}".format(
            pattern, name, e)) from e

    if template == "":
        _logger.debug("field {0} has no template".format(name))
    return Field(name, template, reobj, samples)
