import json
import os
import shutil
import tempfile
import unittest

from ezxlate.core import DEFAULT_CONFIG, LoggingEventSink, AmqpEventSink
from ezxlate.service import make_event_sink
from ezxlate.service.config import Settings, ConfigurationError, load_settings, split_list, QUESTIONS_DISABLED


class SplitListTests(unittest.TestCase):

    def test_text(self):
        self.assertEqual(split_list("cs101, 5\nhist,,"), ["cs101", "5", "hist"])

    def test_list(self):
        self.assertEqual(split_list([" cs101 ", 5, ""]), ["cs101", "5"])

    def test_none(self):
        self.assertEqual(split_list(None), [])


class SettingsTests(unittest.TestCase):

    def test_defaults(self):
        settings = Settings()
        self.assertEqual(dict(settings), DEFAULT_CONFIG)
        self.assertFalse(settings.open)
        self.assertFalse(settings.questions_enabled())
        self.assertFalse(settings.tags_enabled())

    def test_defaults_not_shared(self):
        settings = Settings()
        settings.ips.append("10.0.0.1")
        self.assertEqual(DEFAULT_CONFIG["ips"], [])

    def test_values(self):
        settings = Settings(open=True, ips="10.0.0.1, 10.0.0.2", questions=50, allowed_courses=[5, "hist"])
        self.assertIs(settings.validate(), settings)
        self.assertEqual(settings.ip_list(), ["10.0.0.1", "10.0.0.2"])
        self.assertEqual(settings.allowed_course_list(), ["5", "hist"])
        self.assertTrue(settings.questions_enabled())
        self.assertNotEqual(settings.questions, QUESTIONS_DISABLED)

    def test_invalid_level(self):
        self.assertRaises(ConfigurationError, Settings(questions=42).validate)

    def test_invalid_type(self):
        self.assertRaises(ConfigurationError, Settings(open="yes").validate)

    def test_unknown_setting(self):
        self.assertRaises(ConfigurationError, Settings(colour="blue").validate)


class EventSinkSettingTests(unittest.TestCase):

    def test_logging_by_default(self):
        self.assertIsInstance(make_event_sink(Settings()), LoggingEventSink)

    def test_amqp_host(self):
        sink = make_event_sink(Settings(amqp_host="amqp.example.org"))
        self.assertIsInstance(sink, AmqpEventSink)
        self.assertEqual(sink.host, "amqp.example.org")
        self.assertIsNone(sink.connection)


class LoadSettingsTests(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp(prefix="ezxlate-settings-")
        self.config_file = os.path.join(self.tmpdir, "config.json")

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def write(self, text):
        with open(self.config_file, "w", encoding="utf-8") as f:
            f.write(text)

    def test_create_default(self):
        settings = load_settings(self.config_file, create_default=True)
        self.assertEqual(dict(settings), DEFAULT_CONFIG)
        self.assertTrue(os.path.isfile(self.config_file))

    def test_partial_file(self):
        self.write(json.dumps({"open": True, "key": "0123456789abcdef", "tags": True}))
        settings = load_settings(self.config_file)
        self.assertTrue(settings.open)
        self.assertTrue(settings.tags_enabled())
        self.assertEqual(settings.questions, QUESTIONS_DISABLED)

    def test_missing_file(self):
        self.assertRaises(ConfigurationError, load_settings, self.config_file)

    def test_malformed_file(self):
        self.write("{open: true")
        self.assertRaises(ConfigurationError, load_settings, self.config_file)

    def test_not_an_object(self):
        self.write("[1, 2]")
        self.assertRaises(ConfigurationError, load_settings, self.config_file)


if __name__ == '__main__':
    unittest.main()
