# Throw-away SQLite database with a small course platform schema and sample rows.

import os
import shutil
import tempfile
import unittest

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine

from ezxlate.core import Database, Features, RequestContext


def _id():
    return Column("id", Integer, primary_key=True)


def build_schema(metadata):
    Table("course", metadata, _id(),
          Column("shortname", String(255)),
          Column("fullname", String(50)),
          Column("summary", Text))
    Table("course_sections", metadata, _id(),
          Column("course", Integer),
          Column("section", Integer),
          Column("name", String(255)),
          Column("summary", Text))
    Table("modules", metadata, _id(), Column("name", String(20)))
    Table("course_modules", metadata, _id(),
          Column("course", Integer),
          Column("module", Integer),
          Column("instance", Integer))
    Table("quiz", metadata, _id(),
          Column("course", Integer),
          Column("name", String(40)),
          Column("intro", Text))
    Table("quiz_feedback", metadata, _id(), Column("quizid", Integer), Column("feedbacktext", Text))
    Table("quiz_grade_items", metadata, _id(), Column("quizid", Integer), Column("name", String(255)))
    Table("quiz_sections", metadata, _id(), Column("quizid", Integer), Column("heading", String(255)))
    Table("page", metadata, _id(),
          Column("course", Integer),
          Column("name", String(255)),
          Column("intro", Text))
    Table("grade_items", metadata, _id(),
          Column("courseid", Integer),
          Column("itemname", String(40)),
          Column("itemmodule", String(30)),
          Column("iteminstance", Integer))
    Table("grade_items_history", metadata, _id(),
          Column("oldid", Integer),
          Column("itemname", String(40)))
    Table("tool_recyclebin_course", metadata, _id(), Column("name", String(40)))
    Table("tool_recyclebin_category", metadata, _id(),
          Column("shortname", String(255)),
          Column("fullname", String(50)))
    Table("tag", metadata, _id(),
          Column("name", String(255)),
          Column("rawname", String(255)),
          Column("description", Text))
    Table("context", metadata, _id(),
          Column("contextlevel", Integer),
          Column("instanceid", Integer),
          Column("path", String(255)))
    Table("question_categories", metadata, _id(),
          Column("name", String(255)),
          Column("contextid", Integer))
    Table("question_bank_entries", metadata, _id(), Column("questioncategoryid", Integer))
    Table("question_versions", metadata, _id(),
          Column("questionid", Integer),
          Column("questionbankentryid", Integer),
          Column("version", Integer))
    Table("question", metadata, _id(),
          Column("qtype", String(20)),
          Column("questiontext", Text),
          Column("generalfeedback", Text))
    Table("question_answers", metadata, _id(),
          Column("question", Integer),
          Column("answer", Text),
          Column("feedback", Text))
    Table("question_hints", metadata, _id(), Column("questionid", Integer), Column("hint", Text))
    Table("qtype_multichoice_options", metadata, _id(),
          Column("questionid", Integer),
          Column("correctfeedback", Text),
          Column("partiallycorrectfeedback", Text),
          Column("incorrectfeedback", Text))


SAMPLE_ROWS = {
    "course": [
        {"id": 5, "shortname": "cs101", "fullname": "Intro to CS", "summary": ""},
        {"id": 6, "shortname": "hist", "fullname": "History", "summary": "Old times"},
    ],
    "course_sections": [
        {"id": 11, "course": 5, "section": 0, "name": "General", "summary": "Welcome"},
        {"id": 12, "course": 5, "section": 1, "name": "Week 1", "summary": ""},
    ],
    "modules": [
        {"id": 1, "name": "quiz"},
        {"id": 2, "name": "page"},
        {"id": 3, "name": "subsection"},
    ],
    "course_modules": [
        {"id": 21, "course": 5, "module": 1, "instance": 31},
        {"id": 22, "course": 5, "module": 2, "instance": 41},
        {"id": 23, "course": 6, "module": 1, "instance": 32},
        {"id": 24, "course": 5, "module": 3, "instance": 51},
    ],
    "quiz": [
        {"id": 31, "course": 5, "name": "First quiz", "intro": "Answer all"},
        {"id": 32, "course": 6, "name": "Dates", "intro": ""},
    ],
    "quiz_feedback": [
        {"id": 1, "quizid": 31, "feedbacktext": "Well done"},
        {"id": 2, "quizid": 31, "feedbacktext": ""},
    ],
    "quiz_sections": [
        {"id": 1, "quizid": 31, "heading": "Part A"},
    ],
    "page": [
        {"id": 41, "course": 5, "name": "Reading", "intro": "Read chapter 1"},
    ],
    "grade_items": [
        {"id": 71, "courseid": 5, "itemname": "First quiz", "itemmodule": "quiz", "iteminstance": 31},
    ],
    "grade_items_history": [
        {"id": 81, "oldid": 71, "itemname": "First quiz"},
    ],
    "tool_recyclebin_category": [
        {"id": 1, "shortname": "old", "fullname": "Deleted course"},
    ],
    "tag": [
        {"id": 1, "name": "algebra", "rawname": "Algebra", "description": "Linear things"},
        {"id": 2, "name": "zero", "rawname": "0", "description": None},
    ],
    "context": [
        {"id": 1, "contextlevel": 10, "instanceid": 0, "path": "/1"},
        {"id": 2, "contextlevel": 50, "instanceid": 5, "path": "/1/2"},
        {"id": 3, "contextlevel": 70, "instanceid": 21, "path": "/1/2/3"},
        {"id": 4, "contextlevel": 50, "instanceid": 6, "path": "/1/4"},
    ],
    "question_categories": [
        {"id": 61, "name": "Default for cs101", "contextid": 2},
        {"id": 62, "name": "System", "contextid": 1},
        {"id": 63, "name": "Quiz bank", "contextid": 3},
        {"id": 64, "name": "Empty", "contextid": 2},
        {"id": 65, "name": "History bank", "contextid": 4},
    ],
    "question_bank_entries": [
        {"id": 91, "questioncategoryid": 61},
        {"id": 92, "questioncategoryid": 61},
        {"id": 93, "questioncategoryid": 62},
        {"id": 94, "questioncategoryid": 63},
    ],
    "question": [
        {"id": 101, "qtype": "multichoice", "questiontext": "What is 2+2?", "generalfeedback": "Basic math"},
        {"id": 102, "qtype": "multichoice", "questiontext": "What is 2 + 2?", "generalfeedback": "Basic math"},
        {"id": 103, "qtype": "shortanswer", "questiontext": "12", "generalfeedback": ""},
        {"id": 104, "qtype": "truefalse", "questiontext": "The sky is blue", "generalfeedback": ""},
        {"id": 105, "qtype": "truefalse", "questiontext": "Water is wet", "generalfeedback": ""},
    ],
    "question_versions": [
        {"id": 1, "questionid": 101, "questionbankentryid": 91, "version": 1},
        {"id": 2, "questionid": 102, "questionbankentryid": 91, "version": 2},
        {"id": 3, "questionid": 103, "questionbankentryid": 92, "version": 1},
        {"id": 4, "questionid": 104, "questionbankentryid": 93, "version": 1},
        {"id": 5, "questionid": 105, "questionbankentryid": 94, "version": 1},
    ],
    "question_answers": [
        {"id": 201, "question": 102, "answer": "4", "feedback": "Right"},
        {"id": 202, "question": 102, "answer": "5", "feedback": "Wrong"},
        {"id": 203, "question": 101, "answer": "4", "feedback": "Right"},
    ],
    "question_hints": [
        {"id": 301, "questionid": 102, "hint": "Count fingers"},
    ],
    "qtype_multichoice_options": [
        {"id": 401, "questionid": 102, "correctfeedback": "Correct!", "partiallycorrectfeedback": "",
         "incorrectfeedback": "Incorrect"},
        {"id": 402, "questionid": 101, "correctfeedback": "Correct!", "partiallycorrectfeedback": "",
         "incorrectfeedback": "Incorrect"},
    ],
}


def create_database(path, rows=SAMPLE_ROWS):
    """Create the schema and sample rows in a SQLite file and return the engine."""
    engine = create_engine("sqlite:///%s" % path)
    metadata = MetaData()
    build_schema(metadata)
    metadata.create_all(engine)
    with engine.begin() as conn:
        for name, table_rows in rows.items():
            if table_rows:
                conn.execute(metadata.tables[name].insert(), table_rows)
    return engine


class DatabaseTestCase(unittest.TestCase):
    """Test case working on a fresh copy of the sample database."""

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp(prefix="ezxlate-test-")
        self.engine = create_database(os.path.join(self.tmpdir, "moodle.db"))
        self.db = Database(self.engine)

    def tearDown(self):
        self.engine.dispose()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def context(self, previous_verification=False, extend=False, update_gradebook=False):
        return RequestContext(self.db, Features(previous_verification, extend, update_gradebook))

    def value_of(self, table, row_id, column):
        return self.db.get(table, row_id)[column]
