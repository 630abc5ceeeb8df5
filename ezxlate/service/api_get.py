import logging

from ezxlate.core import run_extract, make_entity
from ezxlate.entities.course import Course
from ezxlate.entities.question import Question
from ezxlate.entities.tag import Tag
from .api import Api, CONTEXT_COURSE, CONTEXT_LEVELS, CONTEXT_MODULE

logger = logging.getLogger(__name__)

QUESTIONS_SQL = ("SELECT question.* FROM question "
                 "LEFT JOIN question_versions ON question_versions.questionid = question.id "
                 "WHERE question_versions.questionbankentryid = :qb")


class ApiGet (Api):
    """Extraction of texts: params "action" plus the identifiers the action needs."""

    action = None

    def check_parameters(self):
        if not self.params.get("action"):
            return self.error("error", "action is missing")
        self.action = str(self.params.action)

    def do(self):
        method = getattr(self, "do_%s" % self.action, None)
        if method is None:
            return self.error("error", "action '%s' unknown" % self.action)
        return method()

    def do_course(self):
        courseid = self.params.get("courseid")
        shortname = self.params.get("shortname")
        if not courseid and not shortname:
            return self.error("error", "courseid or shortname must be provided")
        course = self.find_course(courseid if courseid else shortname)
        if not course:
            return self.error("notfound", "course not found")
        if courseid and shortname and shortname != course.get("shortname"):
            return self.error("notfound", "course not found")
        if not self.course_allowed(course):
            return self.error("restricted", "course restricted in API settings")
        denied = self.require("moodle/course:update",
                              "User defined for the API is not allowed to update this course",
                              courseid=course["id"])
        if denied:
            return denied
        self.data = run_extract(Course(course, self.new_context())) or {}

    def do_module(self):
        if not self.params.get("courseid"):
            return self.error("error", "courseid must be provided")
        if not self.params.get("cmid"):
            return self.error("error", "cmid must be provided")
        course, failure = self.check_course(self.params.courseid)
        if failure:
            return failure
        context = self.new_context()
        cm = self.database.get("course_modules", self.params.cmid)
        if not cm or str(cm.get("course")) != str(course["id"]):
            return self.error("notfound", "module not found")
        module_name = context.module_name(cm.get("module"))
        if module_name == "subsection":
            return self.error("notfound", "module is a subsection")
        denied = self.require("moodle/course:manageactivities",
                              "User defined for the API is not allowed to update this module",
                              cmid=cm["id"])
        if denied:
            return denied
        infos = {"courseid": cm.get("course"), "module": module_name, "cmid": cm["id"]}
        module = make_entity(module_name, cm.get("instance"), context, protected_fields=infos)
        self.data = run_extract(module) or {}

    def do_questioncategories(self):
        if not self.settings.questions_enabled():
            return self.error("restricted", "restricted by plugin settings")
        if not self.params.get("courseid"):
            return self.error("error", "courseid must be provided")
        course, failure = self.check_course(self.params.courseid, "course restricted by API settings")
        if failure:
            return failure
        denied = self.require("moodle/course:update",
                              "User defined for the API is not allowed to update this course",
                              courseid=course["id"])
        if denied:
            return denied
        for category in self._course_categories(course):
            context = self.database.get("context", category.get("contextid"))
            if not context:
                continue
            if not self.authorizer.has_capability("moodle/question:editall", contextid=context["id"]):
                continue
            if context.get("contextlevel", 0) < self.settings.get("questions"):
                continue
            course_id = self.course_of_context(context)
            if course_id and not self.course_allowed(self.find_course(course_id)):
                continue
            if not self.database.get_all("question_bank_entries", category["id"], "questioncategoryid"):
                continue
            self.data[category["id"]] = {
                "name": category.get("name"),
                "context": CONTEXT_LEVELS.get(context.get("contextlevel"), "unknown"),
            }

    def _course_categories(self, course):
        """Question categories of the course, of its activities and of the contexts above the course."""
        context_ids = []
        course_context = self.database.load_one(
            "SELECT * FROM context WHERE contextlevel = :level AND instanceid = :course",
            {"level": CONTEXT_COURSE, "course": course["id"]})
        if course_context:
            path = course_context.get("path") or ""
            context_ids.extend(int(i) for i in path.split("/") if i.strip().isdigit())
            if course_context["id"] not in context_ids:
                context_ids.append(course_context["id"])
        for module_context in self.database.load_multiple(
                "SELECT context.* FROM context JOIN course_modules ON course_modules.id = context.instanceid "
                "WHERE context.contextlevel = :level AND course_modules.course = :course",
                {"level": CONTEXT_MODULE, "course": course["id"]}):
            context_ids.append(module_context["id"])
        categories = []
        for context_id in context_ids:
            categories.extend(self.database.get_all("question_categories", context_id, "contextid"))
        return categories

    def do_questions(self):
        if not self.settings.questions_enabled():
            return self.error("restricted", "restricted by plugin settings")
        if not self.params.get("categoryid"):
            return self.error("error", "categoryid must be provided")
        last = self.params.get("versions") == "last"
        category, _, failure = self.check_category(self.params.categoryid)
        if failure:
            return failure
        sql = QUESTIONS_SQL + (" ORDER BY question_versions.version DESC LIMIT 1" if last else "")
        context = self.new_context()
        questions = dict()
        for entry in self.database.get_all("question_bank_entries", category["id"], "questioncategoryid"):
            for record in self.database.load_multiple(sql, {"qb": entry["id"]}):
                if not self.authorizer.has_capability("moodle/question:edit", questionid=record["id"]):
                    continue
                questions[record["id"]] = run_extract(Question(record, context))
        self.data["categoryid"] = self.params.categoryid
        if questions:
            self.data["questions"] = questions

    def do_tags(self):
        if not self.settings.tags_enabled():
            return self.error("restricted", "restricted by plugin settings")
        denied = self.require("moodle/tag:edit", "User defined for the API is not allowed to update tags")
        if denied:
            return denied
        context = self.new_context()
        for record in self.database.get_all("tag"):
            self.data[record["id"]] = run_extract(Tag(record, context))
