#!/usr/bin/env python
# coding: utf-8

"""
Interface to filter log files from CLI.
"""

import sys
import logging
import configparser

from . import __version__
from . import cli
from . import config
from . import marker
from . import process
from . import rule_view
from . import ruleset
from .errors import LogSieveError, HandlerError, ValidationError

_logger = logging.getLogger(__package__)


def _open_config(ns):
    conf = config.open_config(ns.conf_path, verbose=False)
    if ns.debug:
        lv = logging.DEBUG
    elif ns.verbose:
        lv = logging.INFO
    else:
        lv = logging.WARNING
    ch = config.set_common_logging(conf, logger=_logger, lv=lv)
    return conf, ch


def load_rules(conf, rules_dir=None):
    if rules_dir is None:
        rules_dir = conf.get("general", "rules_dir")
    gfields = config.global_fields(conf)
    _logger.info("load rules from {0}".format(rules_dir))
    return ruleset.load_rules_dir(
        rules_dir, gfields,
        check=conf.getboolean("rules", "check_samples"),
        duplicate_fields=conf.get("rules", "duplicate_fields"))


def print_lines(lines):
    for line in lines:
        print(line)


def process_files(ns):
    conf, ch = _open_config(ns)
    try:
        rule_sets = load_rules(conf, ns.rules_dir)
        state_dir = ns.state_dir
        if state_dir is None:
            state_dir = conf.get("general", "state_dir")
        targets = ns.files
        if len(targets) == 0:
            targets = config.getlist(conf, "general", "src_path")
        if len(targets) == 0:
            raise LogSieveError("no log files to process")

        kwargs = {"batch_size": conf.getint("process", "batch_size"),
                  "encoding": conf.get("process", "encoding"),
                  "errors": conf.get("process", "encoding_errors")}
        for logfile in targets:
            _process_logfile(rule_sets, logfile, state_dir, ns, kwargs)
    finally:
        config.release_common_logging(ch, logger=_logger)


def _process_logfile(rule_sets, logfile, state_dir, ns, kwargs):
    _logger.info("processing log file {0}".format(logfile))
    last = marker.Marker()
    if not ns.ignore_state:
        try:
            last = marker.load_marker(state_dir, logfile)
        except (OSError, ValueError) as e:
            _logger.error("error loading marker for {0}: {1}".format(
                logfile, e))

    try:
        pos = process.process_file(rule_sets, logfile, last, print_lines,
                                   **kwargs)
    except HandlerError as e:
        if e.marker is not None and not ns.no_update_state:
            marker.save_marker(state_dir, logfile, e.marker)
        raise

    if not ns.no_update_state:
        try:
            marker.save_marker(state_dir, logfile, pos)
        except OSError as e:
            _logger.error("error saving marker for {0}: {1}".format(
                logfile, e))


def show_rules(ns):
    conf, ch = _open_config(ns)
    try:
        gfields = config.global_fields(conf)
        rs = ruleset.load_rules_file(
            ns.rulefile, gfields,
            duplicate_fields=conf.get("rules", "duplicate_fields"))
        try:
            rs.check()
        except ValidationError as e:
            if not ns.ignore_samples:
                raise
            _logger.error("error checking rules file: {0}".format(e))

        print("Rules from {0}:".format(ns.rulefile))
        for l_item in rule_view.views(rs):
            print(rule_view.render(l_item, show_templates=ns.templates))

        if ns.debug:
            print()
            print("Generated regexps:")
            for reobj in rs.regexps():
                print(reobj.pattern)
    finally:
        config.release_common_logging(ch, logger=_logger)


def check_rules(ns):
    conf, ch = _open_config(ns)
    try:
        conf.set("rules", "check_samples", "true")
        rule_sets = load_rules(conf, ns.rules_dir)
        n_tpl = sum(len(rs.templates) for rs in rule_sets)
        print("{0} rules files, {1} templates OK".format(
            len(rule_sets), n_tpl))
    finally:
        config.release_common_logging(ch, logger=_logger)


def conf_defaults(_):
    config.show_default_config()


def show_version(_):
    print("logsieve {0}".format(__version__))


# common argument settings
OPT_DEBUG = [["--debug"],
             {"dest": "debug", "action": "store_true",
              "help": "set logging level to debug (default: warning)"}]
OPT_VERBOSE = [["-v", "--verbose"],
               {"dest": "verbose", "action": "store_true",
                "help": "set logging level to info"}]
OPT_CONFIG = [["-c", "--config"],
              {"dest": "conf_path", "metavar": "CONFIG", "action": "store",
               "default": None,
               "help": "configuration file path for logsieve"}]
OPT_RULES_DIR = [["-r", "--rules"],
                 {"dest": "rules_dir", "metavar": "DIR", "action": "store",
                  "default": None,
                  "help": "load rules from this directory "
                          "(default: general.rules_dir in config)"}]
ARG_FILES_OPT = [["files"],
                 {"metavar": "PATH", "nargs": "*",
                  "help": ("log files to process "
                           "(optional; defaultly read from config)")}]

# argument settings for each modes
# description, List[args, kwargs], func
DICT_ARGSET = {
    "process": ["Show log messages not matched by any rules.",
                [OPT_CONFIG, OPT_DEBUG, OPT_VERBOSE, OPT_RULES_DIR,
                 [["-s", "--state-dir"],
                  {"dest": "state_dir", "metavar": "DIR", "action": "store",
                   "default": None,
                   "help": "directory for keeping log file positions "
                           "(default: general.state_dir in config)"}],
                 [["-i", "--ignore-state"],
                  {"dest": "ignore_state", "action": "store_true",
                   "help": "ignore the state and process files from the start"}],
                 [["-n", "--no-update-state"],
                  {"dest": "no_update_state", "action": "store_true",
                   "help": "do not update the state"}],
                 ARG_FILES_OPT],
                process_files],
    "show": ["Parse and show a rules file.",
             [OPT_CONFIG, OPT_DEBUG, OPT_VERBOSE,
              [["-t", "--templates"],
               {"dest": "templates", "action": "store_true",
                "help": "show field templates instead of field names"}],
              [["-I", "--ignore-samples"],
               {"dest": "ignore_samples", "action": "store_true",
                "help": "do not fail on samples not matched"}],
              [["rulefile"],
               {"metavar": "RULEFILE",
                "help": "rules file to show"}]],
             show_rules],
    "check": ["Load all rules files and run their self-tests.",
              [OPT_CONFIG, OPT_DEBUG, OPT_VERBOSE, OPT_RULES_DIR],
              check_rules],
    "conf-defaults": ["Show default configurations.",
                      [],
                      conf_defaults],
    "version": ["Show version.",
                [],
                show_version],
}

ALIASES = {
    "filter": "process",
}


def main(argv=None):
    try:
        return cli.main(DICT_ARGSET, ALIASES, argv)
    except (LogSieveError, OSError, ValueError, configparser.Error) as e:
        sys.exit("error: {0}".format(e))


if __name__ == "__main__":
    main()
