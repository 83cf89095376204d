#!/usr/bin/env python
# coding: utf-8

import os
import logging
import configparser

from . import field

CONFIG_ENV = "LOGSIEVE_CONFIG"
DEFAULT_CONFIG = "/".join((os.path.dirname(os.path.abspath(__file__)),
                           "data/config.conf.default"))
LOAD_SECTION = 'general'
LOAD_OPTION = 'base_filename'
FIELD_SECTION_HEAD = "field:"


def _new_parser():
    # patterns may contain %, values are never interpolated
    return configparser.ConfigParser(interpolation=None)


def getlist(conf, section, name, sep=","):
    ret = conf.get(section, name)
    if ret.strip() == "":
        return []
    else:
        return [e.strip() for e in ret.split(sep)
                if not len(e.strip()) == 0]


def merge_config(conf1, conf2):
    """Overwrite conf1 with conf2."""
    for sec in conf2.sections():
        for opt in conf2.options(sec):
            if conf1.has_option(sec, opt):
                pass
            else:
                if not conf1.has_section(sec):
                    conf1[sec] = {}
                conf1.set(sec, opt, conf2[sec][opt])
    return conf1


def load_defaults(iterable_conf_path=None):
    if iterable_conf_path is None:
        iterable_conf_path = [DEFAULT_CONFIG]
    temp_conf = _new_parser()
    for fn in iterable_conf_path:
        ret = temp_conf.read(fn)
        if len(ret) == 0:
            raise IOError("config load error ({0})".format(fn))

    return temp_conf


def open_config(fn=None, env=CONFIG_ENV, base_default=True, verbose=True):
    """
    Args:
        fn (str, optional): Configuration file path.
        env (str, optional): If fn is None, use Environment Variable of given name.
        base_default (bool, optional): Use default values for missing options.
        verbose (bool, optional): Notify the use of the default configuration.
    """
    conf = _new_parser()

    if fn is None and env is not None:
        fn = os.environ.get(env)

    if fn is None:
        if verbose:
            logging.getLogger(__package__).info(
                "Processing with default configuration ...")
    else:
        if not os.path.exists(fn):
            raise IOError("{0} not found".format(fn))
        ret = conf.read(fn)
        if len(ret) == 0:
            raise IOError("config load error ({0})".format(fn))
        if not conf.has_section(LOAD_SECTION):
            conf[LOAD_SECTION] = {}
        conf.set(LOAD_SECTION, LOAD_OPTION, fn)

    if base_default:
        default_conf = load_defaults([DEFAULT_CONFIG])
        merge_config(conf, default_conf)

    return conf


def show_default_config():
    conf = load_defaults()
    for section in conf.sections():
        print("[{0}]".format(section))
        for option in conf.options(section):
            print("{0} = {1}".format(option, conf[section][option]))
        print()


def global_fields(conf, check=True):
    """Return fields defined in [field:NAME] sections.

    Args:
        conf: config object.
        check (bool, optional): Run field.Field.check() on each field.

    Returns:
        dict: name -> field.Field, in the order of the sections
    """
    d_field = {}
    for sec in conf.sections():
        if not sec.startswith(FIELD_SECTION_HEAD):
            continue
        name = sec[len(FIELD_SECTION_HEAD):].strip()
        attrs = {opt: conf.get(sec, opt) for opt in conf.options(sec)}
        fobj = field.compile_field(name, attrs)
        if check:
            fobj.check()
        d_field[name] = fobj
    return d_field


def set_common_logging(conf, logger=None, logger_name=None,
                       lv=logging.INFO):
    """
    Args:
        conf
        logger (logging.Logger or list[logging.Logger])
        logger_name (str or list[str])
        lv (int): logging level
    Returns:
        logging.SomeHandler
    """
    fn = conf.get("general", "logging")
    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s (%(processName)s) %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S")
    if fn == "":
        ch = logging.StreamHandler()
    else:
        ch = logging.FileHandler(fn)
    ch.setFormatter(fmt)
    ch.setLevel(lv)

    for temp_logger in _iter_loggers(logger, logger_name):
        temp_logger.setLevel(lv)
        temp_logger.addHandler(ch)
        if lv <= logging.DEBUG:
            temp_logger.debug("logger is on debug mode")

    return ch


def release_common_logging(ch, logger=None, logger_name=None):
    for temp_logger in _iter_loggers(logger, logger_name):
        temp_logger.removeHandler(ch)
    ch.close()


def _iter_loggers(logger, logger_name):
    temp_loggers = []
    if logger is None:
        pass
    elif isinstance(logger, list):
        temp_loggers += logger
    elif isinstance(logger, logging.Logger):
        temp_loggers.append(logger)
    else:
        raise TypeError
    if logger_name is None:
        pass
    elif isinstance(logger_name, list):
        temp_loggers += [logging.getLogger(ln) for ln in logger_name]
    elif isinstance(logger_name, str):
        temp_loggers.append(logging.getLogger(logger_name))
    else:
        raise TypeError
    return temp_loggers
