#!/usr/bin/env python
# coding: utf-8

"""
Human-readable form of rule set templates.
Field templates in a template are shown as [name] for local fields
and {name} for global fields.
"""


class Text(str):
    pass


class FieldView:

    def __init__(self, fobj, is_global=False):
        self.field = fobj
        self.is_global = is_global

    def __str__(self):
        if self.is_global:
            return "{" + self.field.name + "}"
        else:
            return "[" + self.field.name + "]"

    def __repr__(self):
        return "FieldView({0!r}, is_global={1})".format(self.field.name,
                                                        self.is_global)

    def __eq__(self, other):
        if not isinstance(other, FieldView):
            return NotImplemented
        return (self.field == other.field and
                self.is_global == other.is_global)

    @property
    def template(self):
        return self.field.template


def _apply_field(fobj, l_item, is_global):
    ret = []
    for item in l_item:
        if not isinstance(item, Text) or fobj.template == "":
            ret.append(item)
            continue

        l_s = item.split(fobj.template)
        for s in l_s[:-1]:
            if s != "":
                ret.append(Text(s))
            ret.append(FieldView(fobj, is_global))
        if l_s[-1] != "":
            ret.append(Text(l_s[-1]))
    return ret


def view(rule_set, template):
    """Split a template into a list of Text and FieldView items.

    Local fields are applied first, then global fields,
    in the same order as in the regular expressions.
    """
    l_item = [Text(template)]
    for fobj in rule_set.fields.values():
        l_item = _apply_field(fobj, l_item, False)
    for fobj in rule_set.global_fields.values():
        l_item = _apply_field(fobj, l_item, True)
    return l_item


def views(rule_set):
    return [view(rule_set, tpl) for tpl in rule_set.templates]


def render(l_item, show_templates=False):
    """Return a template view as a string.

    Args:
        l_item (list): Output of view().
        show_templates (bool, optional): Show the field templates
            instead of the field names.
    """
    buf = []
    for item in l_item:
        if isinstance(item, FieldView) and show_templates:
            buf.append(item.template)
        else:
            buf.append(str(item))
    return "".join(buf)
