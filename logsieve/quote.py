#!/usr/bin/env python
# coding: utf-8

"""
Unquoting of values in rules and configuration files.

Three quoting styles are accepted:
    "double": backslash escapes like \\n, \\t, \\xHH, \\uHHHH and \\"
    'single': only \\' is an escape, everything else is literal
    `raw`: fully literal, cannot contain a backtick
Unquoted values are returned as they are.
Lists are written as [v, v, ...] with independently quoted elements.
"""

import re

from .errors import ParseError

QUOTES = ('"', "'", "`")

_DQ_ESCAPE = re.compile(r'\\(x[0-9a-fA-F]{2}|u[0-9a-fA-F]{4}|U[0-9a-fA-F]{8}'
                        r'|[0-7]{3}|[abfnrtv\\"]|.?)', re.DOTALL)
_SIMPLE_ESCAPES = {"a": "\a", "b": "\b", "f": "\f", "n": "\n",
                   "r": "\r", "t": "\t", "v": "\v", "\\": "\\", '"': '"'}
_LIST_ITEM = re.compile(r'\s*("(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'|`[^`]*`'
                        r'|[^,]*?)\s*(,|\Z)', re.DOTALL)


def _unescape(matchobj, s):
    esc = matchobj.group(1)
    if esc in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[esc]
    elif esc[:1] in ("x", "u", "U") and len(esc) > 1:
        return chr(int(esc[1:], 16))
    elif len(esc) == 3 and esc.isdigit():
        code = int(esc, 8)
        if code > 0o377:
            raise ParseError("octal escape out of range in {0!r}".format(s))
        return chr(code)
    else:
        raise ParseError("invalid escape sequence \\{0} in {1!r}".format(
            esc, s))


def _unquote_double(s):
    if len(s) < 2 or s[-1] != '"':
        raise ParseError("invalid quoted string {0!r}".format(s))
    body = s[1:-1]
    if "\n" in body or "\r" in body:
        raise ParseError("newline in quoted string {0!r}".format(s))
    if '"' in _DQ_ESCAPE.sub("", body):
        raise ParseError("unescaped quote in string {0!r}".format(s))
    return _DQ_ESCAPE.sub(lambda m: _unescape(m, s), body)


def unquote_string(s):
    """Return the value of a (possibly) quoted string.

    Raises:
        ParseError: if the quoting is malformed.
    """
    if s == "":
        return s
    if len(s) == 1:
        raise ParseError("invalid quoted string {0!r}".format(s))

    head = s[0]
    if head == '"':
        return _unquote_double(s)
    elif head == "'":
        if s[-1] != "'":
            raise ParseError("invalid quoted string {0!r}".format(s))
        return s[1:-1].replace("\\'", "'")
    elif head == "`":
        if s[-1] != "`" or "`" in s[1:-1]:
            raise ParseError("invalid quoted string {0!r}".format(s))
        return s[1:-1]
    else:
        return s


def unquote_list(s):
    """Return the list of values in a string like ["a", 'b', `c`]."""
    s = s.strip()
    if len(s) < 2:
        raise ParseError("string {0!r} is too short for a list".format(s))
    if s[0] != "[" or s[-1] != "]":
        raise ParseError("string {0!r} is not a list".format(s))

    body = s[1:-1]
    if body.strip() == "":
        return []

    ret = []
    pos = 0
    while pos <= len(body):
        matchobj = _LIST_ITEM.match(body, pos)
        item = matchobj.group(1)
        if item == "":
            raise ParseError("empty element in list {0!r}".format(s))
        ret.append(unquote_string(item))
        if matchobj.group(2) == "":
            break
        pos = matchobj.end()
    return ret
