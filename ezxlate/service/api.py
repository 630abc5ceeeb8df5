"""Common processing of the API calls.

Every call is a mapping of parameters (the decoded JSON request body)
handled by one Api subclass, whose process() method returns the answer
mapping to send back: {"code": "ok", ...} on success, or
{"code": <code>, "message": <text>} on failure.
"""

import logging

from ezxlate.core import __version__, RequestContext, LoggingEventSink
from ezxlate.core.utils.core_utils import AttrDict, format_exception

logger = logging.getLogger(__name__)

CONTEXT_SYSTEM = 10
CONTEXT_USER = 30
CONTEXT_COURSECAT = 40
CONTEXT_COURSE = 50
CONTEXT_MODULE = 70

CONTEXT_LEVELS = {
    10: "system",
    30: "user",
    40: "coursecat",
    50: "course",
    60: "group",
    70: "module",
    80: "block",
}

MIN_KEY_LENGTH = 10


class Authorizer (object):
    """Decides whether the API may act on a given object."""

    def has_capability(self, capability, **context):
        raise NotImplementedError()


class AllowAll (Authorizer):

    def has_capability(self, capability, **context):
        return True


def is_id(value):
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and value.strip().isdigit()


class Api (object):
    """Base class of the API entry points.

       Subclasses implement do(), and optionally check_parameters(). Both
       may return an answer (usually built with failed()) to end the call;
       otherwise the answer is self.answer, completed with self.data when
       it is not empty.
    """

    def __init__(self, params, settings, database, authorizer=None, event_sink=None, remote_addr=None):
        self.params = AttrDict(params or {})
        self.settings = settings
        self.database = database
        self.authorizer = authorizer or AllowAll()
        self.event_sink = event_sink or LoggingEventSink()
        self.remote_addr = remote_addr
        self.answer = None
        self.data = None

    @staticmethod
    def failed(code="error", message=None):
        answer = {"code": code}
        if message:
            answer["message"] = message
        return answer

    def error(self, code="error", message=None):
        logger.debug("%s failed with %s: %s", type(self).__name__, code, message)
        return self.failed(code, message)

    def process(self):
        self.data = dict()
        self.answer = {"code": "ok"}
        message = self.check_authentication()
        if message:
            logger.warning("Authentication failed: %s", message)
            return self.error("auth", message)
        answer = self.check_parameters()
        if answer:
            return answer
        try:
            answer = self.do()
        except Exception as e:
            logger.exception("Unexpected error in %s: %s", type(self).__name__, format_exception(e))
            return self.error("error", str(e))
        if not answer:
            answer = self.answer
        if "data" not in answer and self.data:
            answer["data"] = self.data
        return answer

    def check_parameters(self):
        return None

    def do(self):
        raise NotImplementedError()

    def check_authentication(self):
        """None if the caller may use the API, otherwise the reason why not."""
        key = self.settings.get("key") or ""
        if not self.settings.get("open"):
            return "API disabled"
        if not key:
            return "Empty key, API disabled"
        if len(key) < MIN_KEY_LENGTH:
            return "Key is too short, API disabled"
        if not self.params.get("key"):
            return "Key not provided in the request"
        if self.params.get("key") != key:
            return "Authentification failed"
        if self.ip_restricted():
            return "Your IP address %s is not allowed" % str(self.remote_addr or "").strip().lower()
        if not self.authorizer.has_capability("local/ezxlate:use"):
            return "The API user doesn't have the capability to use the API"
        return None

    def ip_restricted(self):
        allowed = self.settings.ip_list()
        if not allowed:
            return False
        return str(self.remote_addr or "").strip().lower() not in allowed

    def require(self, capability, message, **context):
        """A "restricted" answer if the authorizer denies `capability`, else None."""
        if self.authorizer.has_capability(capability, **context):
            return None
        return self.error("restricted", message)

    def version(self):
        return __version__

    def new_context(self, features=None):
        return RequestContext(self.database, features)

    def find_course(self, id_or_shortname):
        if is_id(id_or_shortname):
            return self.database.get("course", int(id_or_shortname))
        return self.database.get("course", id_or_shortname, "shortname")

    def course_allowed(self, course):
        """True if the settings let the API work on `course` (a course row)."""
        if not course:
            return False
        allowed = self.settings.allowed_course_list()
        if allowed and not self._in_course_list(course, allowed):
            return False
        if self._in_course_list(course, self.settings.restricted_course_list()):
            return False
        return True

    @staticmethod
    def _in_course_list(course, items):
        for item in items:
            if is_id(item) and int(item) == course.get("id"):
                return True
            if item == course.get("shortname"):
                return True
        return False

    def check_course(self, course_id, restricted_message="course restricted in API settings"):
        """(course row, None) if the course exists and is allowed, otherwise (None, failure answer)."""
        course = self.find_course(course_id)
        if not course:
            return None, self.error("notfound", "course not found")
        if not self.course_allowed(course):
            return None, self.error("restricted", restricted_message)
        return course, None

    def course_of_context(self, context):
        """Id of the course a course or module context belongs to, or None."""
        if context is None:
            return None
        if context.get("contextlevel") == CONTEXT_COURSE:
            return context.get("instanceid")
        if context.get("contextlevel") == CONTEXT_MODULE:
            cm = self.database.get("course_modules", context.get("instanceid"))
            if cm:
                return cm.get("course")
        return None

    def check_category(self, category_id):
        """(category row, context row, None) for an allowed question category, else (None, None, answer)."""
        category = self.database.get("question_categories", category_id)
        if not category:
            return None, None, self.error("notfound", "category not found")
        context = self.database.get("context", category.get("contextid"))
        if not context:
            return None, None, self.error("notfound", "context of category not found")
        denied = self.require("moodle/question:editall",
                              "User defined for the API is not allowed to update this category",
                              contextid=context.get("id"))
        if denied:
            return None, None, denied
        if context.get("contextlevel", 0) < self.settings.get("questions"):
            return None, None, self.error(
                "restricted", "Context level of this question category is not allowed by API settings")
        course_id = self.course_of_context(context)
        if course_id:
            course = self.find_course(course_id)
            if not course:
                return None, None, self.error("notfound", "course for category not found")
            if not self.course_allowed(course):
                return None, None, self.error("restricted", "course for category restricted")
        return category, context, None
