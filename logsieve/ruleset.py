#!/usr/bin/env python
# coding: utf-8

import os
import re
import logging

from . import quote
from . import field
from . import rules_parser
from .errors import ParseError, CompileError, ValidationError

_logger = logging.getLogger(__package__)

RULE_OPTIONS = ("prefix",)
DUPLICATE_POLICIES = ("warn", "error", "ignore")


def _apply_fields(s, fields):
    """Replace escaped field templates in s with the raw field patterns."""
    for fobj in fields.values():
        if fobj.template == "":
            continue
        s = s.replace(re.escape(fobj.template), fobj.pattern.pattern)
    return s


class RuleSet:
    """Templates of expected log messages from one rules file.

    Fields are substituted into the templates by literal text replacement,
    local fields first and global fields afterwards, so a global field
    template appearing in the pattern of a local field is expanded too.
    If the template of a field is a substring of another field template
    or of the static text of a template, it is replaced there as well.

    All regular expressions are compiled in the constructor,
    the object is read-only afterwards.

    Args:
        prefix (str): Text required at the beginning of every line,
            may contain field templates.
        fields (dict): Local fields, name -> field.Field.
        global_fields (dict): Shared fields, name -> field.Field.
            The mapping is referenced, not copied; it must not be
            modified after the rule set is compiled.
        templates (list of str): Example lines with field templates.
        samples (list of str): Real log lines for self-test in check().
        name (str, optional): Source of the rules, used in messages.
    """

    def __init__(self, prefix="", fields=None, global_fields=None,
                 templates=None, samples=None, name=None):
        self.name = name
        self.prefix = prefix
        self.fields = dict(fields) if fields else {}
        self.global_fields = global_fields if global_fields is not None else {}
        self.templates = tuple(templates) if templates else tuple()
        self.samples = tuple(samples) if samples else tuple()

        self._prefix_regex = None
        if self.prefix != "":
            s = _apply_fields(re.escape(self.prefix), self.fields)
            s = _apply_fields(s, self.global_fields)
            self._prefix_regex = self._compile(r"\A" + s)

        self._l_regex = []
        for tpl in self.templates:
            s = re.escape(self.prefix) + re.escape(tpl)
            # local fields first, then global
            s = _apply_fields(s, self.fields)
            s = _apply_fields(s, self.global_fields)
            self._l_regex.append(self._compile(r"\A" + s + r"\Z"))

    def __repr__(self):
        return "RuleSet(name={0!r}, templates={1})".format(
            self.name, len(self.templates))

    def _mes(self, mes):
        if self.name is None:
            return mes
        else:
            return "{0}: {1}".format(self.name, mes)

    def _compile(self, restr):
        try:
            return re.compile(restr)
        except re.error as e:
            raise CompileError(self._mes(
                "invalid regular expression {0!r}: {1}".format(restr, e))
            ) from e

    def regexps(self):
        """Return the compiled template regular expressions."""
        return list(self._l_regex)

    @property
    def prefix_regexp(self):
        return self._prefix_regex

    def match(self, line):
        """Return True if one of the templates matches the whole line."""
        if self._prefix_regex is not None:
            if self._prefix_regex.match(line) is None:
                return False

        for reobj in self._l_regex:
            if field.match_fullspan(reobj, line):
                return True
        return False

    def check(self):
        """Self-test the rule set with the field samples and rule samples.

        Raises:
            ValidationError: for the first sample not matched.
        """
        for fobj in self.fields.values():
            try:
                fobj.check()
            except ValidationError as e:
                raise ValidationError(self._mes(str(e)),
                                      sample=e.sample, field=e.field) from e

        for sample in self.samples:
            if not self.match(sample):
                raise ValidationError(self._mes(
                    "sample message does not match any rules: {0!r}".format(
                        sample)), sample=sample)


def match_any(rule_sets, line):
    """Return True if a rule set matches the line.

    Rule sets are tried in the given order,
    the evaluation stops at the first match.
    """
    for rs in rule_sets:
        if rs.match(line):
            return True
    return False


def compile_rule_set(options, fields, templates, samples,
                     global_fields=None, name=None):
    """Make a RuleSet from parsed (still quoted) values.

    Args:
        options (dict): option name -> raw value, only prefix is known.
        fields (dict): field name -> dict of raw attributes.
        templates (list of str)
        samples (list of str)
        global_fields (dict, optional): name -> field.Field
        name (str, optional): Source of the rules.

    Returns:
        RuleSet

    Raises:
        ValidationError: if a field sample is not matched by its pattern.
    """
    def _mes(mes):
        if name is None:
            return mes
        else:
            return "{0}: {1}".format(name, mes)

    prefix = ""
    for key, value in options.items():
        if key == "prefix":
            try:
                prefix = quote.unquote_string(value)
            except ParseError as e:
                raise ParseError(_mes("option prefix: {0}".format(e))) from e
        else:
            raise CompileError(_mes("unknown option {0!r}".format(key)))

    d_field = {}
    for fname, attrs in fields.items():
        try:
            d_field[fname] = field.compile_field(fname, attrs)
        except (ParseError, CompileError) as e:
            raise type(e)(_mes("field {0}: {1}".format(fname, e))) from e
        # field samples are always checked, rule samples only in check()
        try:
            d_field[fname].check()
        except ValidationError as e:
            raise ValidationError(_mes(str(e)), sample=e.sample,
                                  field=e.field) from e

    return RuleSet(prefix=prefix, fields=d_field, global_fields=global_fields,
                   templates=templates, samples=samples, name=name)


def rule_set_from_state(state, global_fields=None, name=None,
                        duplicate_fields="warn"):
    """Make a RuleSet from a rules_parser.RuleState.

    Args:
        duplicate_fields (str): What to do with a field defined twice,
            "warn" (log a warning, the last definition is used),
            "error" (raise CompileError) or "ignore".
    """
    if duplicate_fields not in DUPLICATE_POLICIES:
        raise ValueError("invalid duplicate_fields policy {0}".format(
            duplicate_fields))

    for fname in state.duplicate_fields:
        mes = "field {0} defined more than once".format(fname)
        if name is not None:
            mes = "{0}: {1}".format(name, mes)
        if duplicate_fields == "error":
            raise CompileError(mes)
        elif duplicate_fields == "warn":
            _logger.warning(mes + ", the last definition is used")

    return compile_rule_set(state.options, state.fields, state.templates,
                            state.samples, global_fields=global_fields,
                            name=name)


def parse_rules(data, global_fields=None, name=None, duplicate_fields="warn"):
    """Parse the text of a rules file into a RuleSet."""
    try:
        state = rules_parser.parse(data)
    except ParseError as e:
        if name is None:
            raise
        raise ParseError("{0}: {1}".format(name, e)) from e
    return rule_set_from_state(state, global_fields, name=name,
                               duplicate_fields=duplicate_fields)


def load_rules_file(filename, global_fields=None, duplicate_fields="warn"):
    with open(filename, "r", encoding="utf-8") as f:
        data = f.read()
    return parse_rules(data, global_fields, name=filename,
                       duplicate_fields=duplicate_fields)


def load_rules_dir(dirname, global_fields=None, check=True,
                   duplicate_fields="warn"):
    """Load all rules files in a directory.

    Files are loaded in the order of their names, hidden files are skipped.
    The returned order is the order rule sets are tried in.

    Args:
        dirname (str): Rules directory.
        global_fields (dict, optional): name -> field.Field
        check (bool, optional): Run RuleSet.check() on each rule set.
            Field samples are checked regardless.

    Returns:
        list of RuleSet
    """
    if not os.path.isdir(dirname):
        raise IOError("rules directory {0} not found".format(dirname))

    l_rs = []
    for fn in sorted(os.listdir(dirname)):
        if fn.startswith("."):
            continue
        fp = os.path.join(dirname, fn)
        if not os.path.isfile(fp):
            continue
        rs = load_rules_file(fp, global_fields,
                             duplicate_fields=duplicate_fields)
        if check:
            rs.check()
        _logger.debug("loaded {0} templates from {1}".format(
            len(rs.templates), fp))
        l_rs.append(rs)

    _logger.info("loaded rules from {0} files in {1}".format(
        len(l_rs), dirname))
    return l_rs
