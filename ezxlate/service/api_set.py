import logging
from collections.abc import Mapping

from ezxlate.core import Features, make_entity, run_update
from ezxlate.entities.course import Course
from ezxlate.entities.question import Question
from ezxlate.entities.section import Section
from ezxlate.entities.tag import Tag
from .api import Api

logger = logging.getLogger(__name__)


class ApiSet (Api):
    """Update of texts: params "object", "data" and optionally "previous", "extend" and "gradebook".

       The answer code is "ok" when every text was updated, "partial" when
       some failed (detailed under "errors"). Columns widened to fit the new
       texts are listed under "extended". A change notice is emitted when at
       least one stored value actually changed.
    """

    object_name = None
    context = None
    report = None

    def check_parameters(self):
        if not self.params.get("object"):
            return self.error("error", "object is missing")
        if not self.params.get("data"):
            return self.error("error", "data are missing")
        if not isinstance(self.params.data, Mapping):
            return self.error("error", "incorrect data")
        self.object_name = str(self.params.object)
        try:
            features = Features.resolve(self.settings, self.params)
        except ValueError as e:
            return self.error("error", "incorrect feature flag: %s" % e)
        logger.debug("Update features: %s", features)
        self.context = self.new_context(features)

    def do(self):
        method = getattr(self, "do_%s" % self.object_name, None)
        if method is None:
            return self.error("error", "object '%s' unknown" % self.object_name)
        return method()

    def end(self, entity):
        self.report = run_update(entity, self.params.data, self.params.get("previous"), self.context)
        self.answer.update(self.report.as_answer())

    def notify(self, event_name, payload):
        if not self.context.ledger:
            return
        payload = dict(payload)
        payload["changed"] = self.context.ledger.as_strings()
        self.event_sink.emit(event_name, payload)

    def do_course(self):
        if not self.params.get("courseid"):
            return self.error("error", "courseid must be provided")
        if not self.params.get("shortname"):
            return self.error("error", "shortname must be provided")
        course, failure = self.check_course(self.params.courseid)
        if failure:
            return failure
        if self.params.shortname != course.get("shortname"):
            return self.error("notfound", "incorrect shortname")
        denied = self.require("moodle/course:update",
                              "User defined for the API is not allowed to update this course",
                              courseid=course["id"])
        if denied:
            return denied
        self.end(Course(course, self.context))
        self.notify("course_updated", {"courseid": course["id"]})

    def do_section(self):
        if not self.params.get("courseid"):
            return self.error("error", "courseid must be provided")
        if not self.params.get("sectionid"):
            return self.error("error", "sectionid must be provided")
        course, failure = self.check_course(self.params.courseid)
        if failure:
            return failure
        denied = self.require("moodle/course:update",
                              "User defined for the API is not allowed to update this course",
                              courseid=course["id"])
        if denied:
            return denied
        section = self.database.load_one("SELECT * FROM course_sections WHERE course = :course AND id = :sectionid",
                                         {"course": course["id"], "sectionid": self.params.sectionid})
        if not section:
            return self.error("notfound", "section not found")
        self.end(Section(section, self.context))
        self.notify("course_section_updated", {"courseid": course["id"],
                                               "sectionid": section["id"],
                                               "sectionnum": section.get("section")})

    def do_module(self):
        if not self.params.get("courseid"):
            return self.error("error", "courseid must be provided")
        if not self.params.get("module"):
            return self.error("error", "module name must be provided")
        if not self.params.get("cmid"):
            return self.error("error", "cmid must be provided")
        course, failure = self.check_course(self.params.courseid)
        if failure:
            return failure
        cm = self.database.get("course_modules", self.params.cmid)
        if not cm or str(cm.get("course")) != str(course["id"]):
            return self.error("notfound", "module not found")
        module_name = self.context.module_name(cm.get("module"))
        if module_name != self.params.module:
            return self.error("notfound", "module is not a %s" % self.params.module)
        if module_name == "subsection":
            return self.error("notfound", "module is a subsection")
        denied = self.require("moodle/course:manageactivities",
                              "User defined for the API is not allowed to update this module",
                              cmid=cm["id"])
        if denied:
            return denied
        module = make_entity(module_name, cm.get("instance"), self.context)
        self.end(module)
        if self.context.ledger:
            name = self.params.data.get("name")
            if name is None:
                name = (module.get() or {}).get("name")
            self.notify("course_module_updated", {"cmid": cm["id"],
                                                  "modulename": module_name,
                                                  "instanceid": cm.get("instance"),
                                                  "name": name})

    def do_question(self):
        if not self.settings.questions_enabled():
            return self.error("restricted", "restricted by plugin settings")
        if not self.params.get("categoryid"):
            return self.error("error", "categoryid must be provided")
        category, _, failure = self.check_category(self.params.categoryid)
        if failure:
            return failure
        if self.params.get("questionid") is None:
            return self.error("error", "questionid must be provided")
        question = self.database.get("question", self.params.questionid)
        if not question:
            return self.error("notfound", "question not found")
        version = self.database.get("question_versions", question["id"], "questionid")
        if not version:
            return self.error("notfound", "no version")
        bank = self.database.get("question_bank_entries", version.get("questionbankentryid"))
        if not bank or str(bank.get("questioncategoryid")) != str(category["id"]):
            return self.error("notfound", "wrong category")
        denied = self.require("moodle/question:edit",
                              "User defined for the API is not allowed to update this question",
                              questionid=question["id"])
        if denied:
            return denied
        self.end(Question(question, self.context))
        self.notify("question_updated", {"questionid": question["id"], "categoryid": category["id"]})

    def do_tag(self):
        if not self.params.get("id"):
            return self.error("error", "id must be provided")
        if not self.settings.tags_enabled():
            return self.error("restricted", "tag management restricted in api parameters")
        tag = self.database.get("tag", self.params.id)
        if not tag:
            return self.error("notfound", "tag not found")
        denied = self.require("moodle/tag:edit", "User defined for the API is not allowed to update tags")
        if denied:
            return denied
        self.end(Tag(tag, self.context))
        self.notify("tag_updated", {"tagid": tag["id"],
                                    "rawname": self.params.data.get("rawname", tag.get("rawname")),
                                    "name": self.params.data.get("name", tag.get("name"))})
