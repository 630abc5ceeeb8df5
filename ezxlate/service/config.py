"""Server settings: loading, defaults and validation."""

import copy
import json
import logging
import pkgutil

import jsonschema

from ezxlate.core.utils.core_utils import AttrDict, DEFAULT_CONFIG, DEFAULT_CONFIG_FILE, read_config, \
    format_exception

logger = logging.getLogger(__name__)

QUESTIONS_DISABLED = 999
"""Value of the "questions" setting that disables the question bank"""

_schema = None


class ConfigurationError (Exception):
    """The server settings are missing or invalid."""
    pass


def config_schema():
    global _schema
    if _schema is None:
        _schema = json.loads(pkgutil.get_data(__name__.rsplit(".", 1)[0], 'schemas/config.schema.json').decode())
    return _schema


def split_list(value):
    """Items of a list setting, given either as a list or as comma and newline separated text."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.replace(",", "\n").split("\n")
    return [str(item).strip() for item in value if str(item).strip()]


class Settings (AttrDict):
    """Server settings, DEFAULT_CONFIG completed with the values given."""

    def __init__(self, *args, **kwargs):
        super(Settings, self).__init__(copy.deepcopy(DEFAULT_CONFIG))
        self.update(dict(*args, **kwargs))

    def validate(self):
        try:
            jsonschema.validate(dict(self), config_schema())
        except jsonschema.ValidationError as e:
            raise ConfigurationError("Invalid settings: %s" % e.message)
        return self

    def ip_list(self):
        return [ip.lower() for ip in split_list(self.get("ips"))]

    def allowed_course_list(self):
        return split_list(self.get("allowed_courses"))

    def restricted_course_list(self):
        return split_list(self.get("restricted_courses"))

    def questions_enabled(self):
        return self.get("questions", QUESTIONS_DISABLED) != QUESTIONS_DISABLED

    def tags_enabled(self):
        return bool(self.get("tags"))


def load_settings(config_file=None, create_default=False):
    """Read and validate the settings stored in `config_file` (default: DEFAULT_CONFIG_FILE)."""
    config_file = config_file or DEFAULT_CONFIG_FILE
    try:
        config = read_config(config_file, create_default=create_default)
    except (OSError, ValueError) as e:
        raise ConfigurationError("Unable to read settings from %s: %s" % (config_file, format_exception(e)))
    if not isinstance(config, dict):
        raise ConfigurationError("Settings in %s must be a JSON object" % config_file)
    logger.debug("Loaded settings from %s", config_file)
    return Settings(config).validate()
