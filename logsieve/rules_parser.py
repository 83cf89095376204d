#!/usr/bin/env python
# coding: utf-8

"""
Parser for rules files.

A rules file consists of a header with options and field definitions,
a list of templates and a list of samples, separated by lines of
three or more dashes:

    prefix = "Jun  2 23:17:13 mail dovecot: "

    field num {
        template = '123'
        pattern = '\\d+'
        samples = ['1', '42']
    }

    ---
    IMAP(user): Disconnected: Logged out bytes=123/123
    ---
    Jun  2 23:17:22 mail dovecot: IMAP(foo): Disconnected: Logged out bytes=1/2

Values are kept in their raw (quoted) form here,
they are unquoted when the rule set is compiled.
"""

import re
import logging

import pyparsing as pp

from .errors import ParseError

_logger = logging.getLogger(__package__)

_EOL = re.compile(r"\r\n|[\r\n]")
_SEPARATOR = re.compile(r"[ \t]*---+[ \t]*")
COMMENT_HEAD = "#"


class RuleState:
    """Flat result of parsing a rules file.

    Attributes:
        options (dict): option name -> raw value
        fields (dict): field name -> dict of attribute name -> raw value
        templates (list of str)
        samples (list of str)
        duplicate_fields (list of str): field names defined more than once,
            the later definition is kept in fields
    """

    def __init__(self):
        self.options = {}
        self.fields = {}
        self.templates = []
        self.samples = []
        self.duplicate_fields = []

    def set_option(self, key, value):
        self.options[key.strip()] = value.strip()

    def new_field(self, name):
        name = name.strip()
        if name in self.fields:
            self.duplicate_fields.append(name)
        attrs = {}
        self.fields[name] = attrs
        return attrs

    def add_template(self, line):
        line = line.strip()
        if line == "" or line.startswith(COMMENT_HEAD):
            return
        self.templates.append(line)

    def add_sample(self, line):
        line = line.strip()
        if line == "" or line.startswith(COMMENT_HEAD):
            return
        self.samples.append(line)


def _header_grammar():
    name = pp.Word(pp.alphanums + "-_")
    name.set_name("name")

    dq_string = pp.Regex(r'"(?:\\.|[^"\\\r\n])*"')
    sq_string = pp.Regex(r"'(?:\\'|[^'\r\n])*'")
    raw_string = pp.Regex(r"`[^`]*`")
    string = dq_string | sq_string | raw_string
    string.set_name("quoted string")

    str_list = pp.original_text_for(
        pp.Literal("[") + pp.Optional(string + pp.ZeroOrMore("," + string))
        + pp.Literal("]"))
    str_list.set_name("list")

    value = str_list | string
    statement = pp.Group(name("key") + pp.Suppress("=") + value("value"))
    field = pp.Group(pp.Suppress(pp.CaselessKeyword("field"))
                     + name("name")
                     + pp.Suppress("{")
                     + pp.Group(pp.ZeroOrMore(statement))("attrs")
                     + pp.Suppress("}"))

    header = pp.ZeroOrMore(field | statement) + pp.StringEnd()
    header.ignore(pp.python_style_comment)
    return header


_HEADER = _header_grammar()


def _split_sections(data):
    """Split lines into header, templates and samples sections."""
    sections = [[]]
    for line in _EOL.split(data):
        if len(sections) < 3 and _SEPARATOR.fullmatch(line):
            sections.append([])
        else:
            sections[-1].append(line)
    while len(sections) < 3:
        sections.append([])
    return sections


def parse(data):
    """Parse the text of a rules file.

    Args:
        data (str): Contents of a rules file.

    Returns:
        RuleState

    Raises:
        ParseError: if the header is not well-formed.
    """
    header, templates, samples = _split_sections(data)

    state = RuleState()
    try:
        ret = _HEADER.parse_string("\n".join(header), parse_all=True)
    except pp.ParseBaseException as e:
        raise ParseError("syntax error at line {0}, column {1}: {2}".format(
            e.lineno, e.col, e.msg)) from e

    # named results wrap the values, read the tokens by position
    for item in ret:
        if "name" in item:
            attrs = state.new_field(item[0])
            for stmt in item[1]:
                attrs[stmt[0].strip()] = stmt[1].strip()
        else:
            state.set_option(item[0], item[1])

    for line in templates:
        state.add_template(line)
    for line in samples:
        state.add_sample(line)

    _logger.debug("parsed {0} fields, {1} templates, {2} samples".format(
        len(state.fields), len(state.templates), len(state.samples)))
    return state
