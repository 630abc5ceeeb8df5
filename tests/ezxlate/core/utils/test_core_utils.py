import os
import shutil
import tempfile
import unittest

import requests

from ezxlate.core import stob, format_exception, AttrDict, read_config, write_config, read_credential, \
    write_credential, get_credential, DEFAULT_CONFIG
from ezxlate.core.utils.version_utils import is_compatible


class StobTests(unittest.TestCase):

    def test_true(self):
        for value in ("y", "Yes", "TRUE", "on", "1", 1):
            self.assertTrue(stob(value))

    def test_false(self):
        for value in ("n", "No", "false", "OFF", "0", 0):
            self.assertFalse(stob(value))

    def test_invalid(self):
        self.assertRaises(ValueError, stob, "maybe")


class FormatExceptionTests(unittest.TestCase):

    def test_format(self):
        self.assertEqual(format_exception(ValueError("bad value")), "[ValueError] bad value")
        self.assertEqual(format_exception("text"), "text")

    def test_http_error(self):
        response = requests.Response()
        response.status_code = 500
        response._content = b"server\nfailure"
        e = requests.HTTPError("500 Server Error", response=response)
        self.assertEqual(format_exception(e), "[HTTPError] 500 Server Error - Server responded: server: failure")


class AttrDictTests(unittest.TestCase):

    def test_attributes(self):
        d = AttrDict({"key": "value"})
        self.assertEqual(d.key, "value")
        d.other = 1
        self.assertEqual(d["other"], 1)
        self.assertRaises(AttributeError, getattr, d, "missing")


class ConfigFileTests(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp(prefix="ezxlate-config-")

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_create_default_config(self):
        config_file = os.path.join(self.tmpdir, "sub", "config.json")
        config = read_config(config_file, create_default=True)
        self.assertTrue(os.path.isfile(config_file))
        self.assertEqual(dict(config), DEFAULT_CONFIG)

    def test_write_and_read_config(self):
        config_file = os.path.join(self.tmpdir, "config.json")
        write_config(config_file, {"open": True, "key": "clé-0123456789"})
        self.assertEqual(read_config(config_file)["key"], "clé-0123456789")

    def test_missing_config(self):
        self.assertRaises(OSError, read_config, os.path.join(self.tmpdir, "nothing.json"))

    def test_credentials(self):
        credential_file = os.path.join(self.tmpdir, "credential.json")
        write_credential(credential_file, {"moodle.example.org": {"key": "0123456789"}})
        self.assertEqual(read_credential(credential_file)["moodle.example.org"]["key"], "0123456789")
        self.assertEqual(get_credential("moodle.example.org", credential_file), "0123456789")
        self.assertEqual(get_credential("MOODLE.example.org", credential_file), "0123456789")
        self.assertIsNone(get_credential("other.example.org", credential_file))


class VersionTests(unittest.TestCase):

    def test_is_compatible(self):
        self.assertTrue(is_compatible("1.0.2", [[">=1.0.0", "<2.0.0"]]))
        self.assertFalse(is_compatible("2.1", [[">=1.0.0", "<2.0.0"]]))
        self.assertTrue(is_compatible("2.1", [[">=1.0.0", "<2.0.0"], ["==2.1"]]))
        self.assertFalse(is_compatible("2.1", []))


if __name__ == '__main__':
    unittest.main()
