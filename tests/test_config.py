#!/usr/bin/env python
# coding: utf-8

import os
import shutil
import logging
import tempfile
import unittest

from logsieve import config
from logsieve.errors import ParseError, ValidationError

TESTDATA = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                        "testdata")


class TestConfig(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def _conf_file(self, data):
        fn = os.path.join(self.tmpdir, "test.conf")
        with open(fn, "w") as f:
            f.write(data)
        return fn

    def test_defaults(self):
        conf = config.open_config(env=None, verbose=False)
        self.assertEqual(conf.getint("process", "batch_size"), 20)
        self.assertEqual(conf.get("process", "encoding"), "utf-8")
        self.assertEqual(conf.get("rules", "duplicate_fields"), "warn")
        self.assertTrue(conf.getboolean("rules", "check_samples"))
        self.assertEqual(config.getlist(conf, "general", "src_path"), [])
        self.assertEqual(config.global_fields(conf), {})

    def test_merge(self):
        fn = self._conf_file("""
[general]
src_path = /var/log/mail.log, /var/log/auth.log

[process]
batch_size = 5
""")
        conf = config.open_config(fn, env=None, verbose=False)
        self.assertEqual(conf.getint("process", "batch_size"), 5)
        self.assertEqual(conf.get("process", "encoding"), "utf-8")
        self.assertEqual(config.getlist(conf, "general", "src_path"),
                         ["/var/log/mail.log", "/var/log/auth.log"])
        self.assertEqual(conf.get(config.LOAD_SECTION, config.LOAD_OPTION),
                         fn)

    def test_env(self):
        fn = self._conf_file("[process]\nbatch_size = 7\n")
        os.environ["LOGSIEVE_TEST_CONFIG"] = fn
        try:
            conf = config.open_config(env="LOGSIEVE_TEST_CONFIG",
                                      verbose=False)
        finally:
            del os.environ["LOGSIEVE_TEST_CONFIG"]
        self.assertEqual(conf.getint("process", "batch_size"), 7)

    def test_missing_file(self):
        with self.assertRaises(IOError):
            config.open_config(os.path.join(self.tmpdir, "nothing.conf"),
                               env=None)

    def test_global_fields(self):
        conf = config.open_config(os.path.join(TESTDATA, "logsieve.conf"),
                                  env=None, verbose=False)
        gfields = config.global_fields(conf)
        self.assertEqual(list(gfields), ["timestamp", "IP"])
        self.assertEqual(gfields["timestamp"].template, "Jun  2 23:17:13")
        self.assertEqual(gfields["IP"].samples,
                         ("192.168.100.1", "2003::feff:1234"))

    def test_percent_in_pattern(self):
        fn = self._conf_file("""
[field:percent]
template = '50%'
pattern = '\\d+%'
samples = ['100%']
""")
        conf = config.open_config(fn, env=None, verbose=False)
        gfields = config.global_fields(conf)
        self.assertEqual(gfields["percent"].pattern.pattern, "\\d+%")

    def test_global_field_bad_sample(self):
        fn = self._conf_file("""
[field:num]
template = '1'
pattern = '\\d+'
samples = ['12', 'x']
""")
        conf = config.open_config(fn, env=None, verbose=False)
        with self.assertRaises(ValidationError) as cm:
            config.global_fields(conf)
        self.assertEqual(cm.exception.field, "num")
        self.assertEqual(len(config.global_fields(conf, check=False)), 1)

    def test_global_field_unknown_attribute(self):
        fn = self._conf_file("""
[field:num]
pattern = '\\d+'
example = '1'
""")
        conf = config.open_config(fn, env=None, verbose=False)
        with self.assertRaises(ParseError):
            config.global_fields(conf)

    def test_logging(self):
        log_fn = os.path.join(self.tmpdir, "logsieve.log")
        fn = self._conf_file("[general]\nlogging = {0}\n".format(log_fn))
        conf = config.open_config(fn, env=None, verbose=False)
        ch = config.set_common_logging(conf, logger_name="logsieve.test")
        logging.getLogger("logsieve.test").info("hello")
        config.release_common_logging(ch, logger_name="logsieve.test")
        with open(log_fn) as f:
            self.assertIn("hello", f.read())


if __name__ == "__main__":
    unittest.main()
