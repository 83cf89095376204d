"""argparse wrapper"""

import os
import sys
import argparse


def main(d_argset, d_alias=None, argv=None):
    if argv is None:
        argv = sys.argv
    command_path = os.path.basename(argv[0])

    buf_usage = [
        ("usage: " + command_path + " SUBCOMMAND [options and arguments] ..."),
        "",
        "subcommands: "
    ]

    d_subc = {}
    for key, argset in d_argset.items():
        d_subc[key] = argset[0]
    if d_alias:
        for alias, key in d_alias.items():
            d_subc[alias] = "same as {0}".format(key)

    buf_usage += ["  {0}: {1}".format(k, v)
                  for k, v in sorted(d_subc.items())]

    buf_usage += [
        "",
        ("try \"" + command_path + " SUBCOMMAND -h\" "
         "to refer detailed subcommand usage")
    ]
    usage = "\n".join(buf_usage)

    if len(argv) < 2:
        sys.exit(usage)
    mode = argv[1]
    if mode in ("-h", "--help"):
        sys.exit(usage)
    if d_alias and mode in d_alias:
        mode = d_alias[mode]
    if mode not in d_argset:
        sys.exit("invalid subcommand {0}\n\n{1}".format(mode, usage))
    commandline = argv[2:]

    desc, l_argset, func = d_argset[mode]
    ap = argparse.ArgumentParser(prog=" ".join(argv[0:2]),
                                 description=desc)
    for args, kwargs in l_argset:
        ap.add_argument(*args, **kwargs)
    ns = ap.parse_args(commandline)
    return func(ns)
