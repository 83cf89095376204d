#!/usr/bin/env python
# coding: utf-8

import io
import os
import shutil
import tempfile
import unittest
from unittest import mock

from logsieve import field
from logsieve import marker
from logsieve import process
from logsieve import ruleset
from logsieve.errors import HandlerError


class _Collector:

    def __init__(self, fail_at=None):
        self.batches = []
        self._fail_at = fail_at

    def __call__(self, lines):
        if self._fail_at is not None and len(self.batches) == self._fail_at:
            raise RuntimeError("handler is broken")
        self.batches.append(lines)

    @property
    def lines(self):
        return [line for batch in self.batches for line in batch]


def _rule_sets():
    fields = {"num": field.Field("num", "123", r"\d+")}
    return [ruleset.RuleSet(fields=fields, templates=["known 123"])]


class TestProcess(unittest.TestCase):

    def test_batches(self):
        handler = _Collector()
        lines = ["line {0}".format(i) for i in range(45)]
        process.process([], lines, handler)
        self.assertEqual([len(b) for b in handler.batches], [20, 20, 5])
        self.assertEqual(handler.lines, lines)

    def test_batch_size(self):
        handler = _Collector()
        process.process([], ["a", "b", "c"], handler, batch_size=2)
        self.assertEqual(handler.batches, [["a", "b"], ["c"]])

        with self.assertRaises(ValueError):
            process.process([], ["a"], handler, batch_size=0)

    def test_batches_are_new_lists(self):
        handler = _Collector()
        process.process([], ["a", "b", "c"], handler, batch_size=1)
        self.assertEqual(handler.batches, [["a"], ["b"], ["c"]])
        self.assertIsNot(handler.batches[0], handler.batches[1])

    def test_no_lines(self):
        handler = _Collector()
        process.process(_rule_sets(), [], handler)
        process.process([], ["", "   ", "\t\n"], handler)
        self.assertEqual(handler.batches, [])

    def test_filter(self):
        handler = _Collector()
        lines = ["known 1", "unknown 2", "known 42", "known x",
                 "  known 7  \n", "unknown 3\n"]
        process.process(_rule_sets(), lines, handler)
        self.assertEqual(handler.lines, ["unknown 2", "known x", "unknown 3"])

    def test_bytes(self):
        handler = _Collector()
        process.process([], [b"caf\xc3\xa9\n", b"bad \xff byte\n"], handler)
        self.assertEqual(handler.lines, ["café", "bad \ufffd byte"])

        handler = _Collector()
        process.process([], [b"bad \xff byte\n"], handler, errors="ignore")
        self.assertEqual(handler.lines, ["bad  byte"])

    def test_undecodable_not_matched(self):
        rule_sets = [ruleset.RuleSet(templates=["disk ok"])]
        handler = _Collector()
        process.process(rule_sets, [b"disk ok\n", b"disk\xff ok\n"], handler)
        self.assertEqual(handler.lines, ["disk\ufffd ok"])

    def test_handler_error(self):
        handler = _Collector(fail_at=1)
        lines = ["line {0}".format(i) for i in range(45)]
        consumed = []

        def _gen():
            for line in lines:
                consumed.append(line)
                yield line

        with self.assertRaises(HandlerError) as cm:
            process.process([], _gen(), handler)
        self.assertIsInstance(cm.exception.__cause__, RuntimeError)
        self.assertEqual(len(handler.lines), 20)
        self.assertEqual(len(consumed), 40)


class TestProcessFile(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.fn = os.path.join(self.tmpdir, "test.log")

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def _append(self, lines):
        with open(self.fn, "a") as f:
            for line in lines:
                f.write(line + "\n")

    def test_incremental(self):
        self._append(["known 1", "unknown 1", "known 2"])
        handler = _Collector()
        pos = process.process_file(_rule_sets(), self.fn, marker.Marker(),
                                   handler)
        self.assertEqual(handler.lines, ["unknown 1"])
        self.assertEqual(pos.offset, os.path.getsize(self.fn))

        handler = _Collector()
        pos2 = process.process_file(_rule_sets(), self.fn, pos, handler)
        self.assertEqual(handler.batches, [])
        self.assertEqual(pos2, pos)

        self._append(["unknown 2", "known 3"])
        handler = _Collector()
        pos3 = process.process_file(_rule_sets(), self.fn, pos2, handler)
        self.assertEqual(handler.lines, ["unknown 2"])
        self.assertEqual(pos3.offset, os.path.getsize(self.fn))

    def test_no_marker(self):
        self._append(["unknown 1"])
        handler = _Collector()
        process.process_file([], self.fn, None, handler)
        self.assertEqual(handler.lines, ["unknown 1"])

    def test_truncated(self):
        self._append(["unknown {0}".format(i) for i in range(10)])
        pos = process.process_file([], self.fn, None, _Collector())

        with open(self.fn, "w") as f:
            f.write("fresh\n")
        handler = _Collector()
        process.process_file([], self.fn, pos, handler)
        self.assertEqual(handler.lines, ["fresh"])

    def test_rotated(self):
        self._append(["unknown {0}".format(i) for i in range(10)])
        pos = process.process_file([], self.fn, None, _Collector())
        if pos.inode == 0:
            self.skipTest("no inode numbers on this platform")

        os.rename(self.fn, self.fn + ".1")
        self._append(["first"] + ["second {0}".format(i) for i in range(20)])
        handler = _Collector()
        process.process_file([], self.fn, pos, handler)
        self.assertEqual(handler.lines[0], "first")
        self.assertEqual(len(handler.lines), 21)

    def test_handler_error(self):
        lines = ["line {0:02d}".format(i) for i in range(45)]
        self._append(lines)
        size_20 = sum(len(line) + 1 for line in lines[:20])

        with self.assertRaises(HandlerError) as cm:
            process.process_file([], self.fn, marker.Marker(),
                                 _Collector(fail_at=1))
        failed_at = cm.exception.marker
        self.assertIsNotNone(failed_at)
        self.assertEqual(failed_at.offset, size_20)

        handler = _Collector()
        pos = process.process_file([], self.fn, failed_at, handler)
        self.assertEqual(handler.lines, lines[20:])
        self.assertEqual(pos.offset, os.path.getsize(self.fn))

    def test_handler_error_first_batch(self):
        self._append(["a", "b"])
        with self.assertRaises(HandlerError) as cm:
            process.process_file([], self.fn, None, _Collector(fail_at=0))
        self.assertEqual(cm.exception.marker.offset, 0)

    def test_missing_file(self):
        with self.assertRaises(OSError):
            process.process_file([], os.path.join(self.tmpdir, "nothing"),
                                 None, _Collector())

    def _open_close_failing(self, fn, mode):
        return _CloseFailingFile(io.open(fn, mode))

    def test_close_error(self):
        self._append(["unknown 1"])
        handler = _Collector()
        with mock.patch("logsieve.process.open", create=True,
                        side_effect=self._open_close_failing):
            with self.assertRaises(OSError) as cm:
                process.process_file([], self.fn, None, handler)
        self.assertEqual(str(cm.exception), "close failed")
        self.assertEqual(handler.lines, ["unknown 1"])

    def test_close_error_after_handler_error(self):
        self._append(["unknown 1"])
        with mock.patch("logsieve.process.open", create=True,
                        side_effect=self._open_close_failing):
            with self.assertLogs("logsieve", level="WARNING") as log_cm:
                with self.assertRaises(HandlerError) as cm:
                    process.process_file([], self.fn, None,
                                         _Collector(fail_at=0))
        self.assertEqual(cm.exception.marker.offset, 0)
        self.assertIn("close failed", log_cm.output[0])


class _CloseFailingFile:

    def __init__(self, fileobj):
        self._fileobj = fileobj

    def __getattr__(self, name):
        return getattr(self._fileobj, name)

    def close(self):
        self._fileobj.close()
        raise OSError("close failed")


if __name__ == "__main__":
    unittest.main()
