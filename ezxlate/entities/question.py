from ezxlate.core.entity import Entity, register_entity

FEEDBACK_FIELDS = ["correctfeedback", "partiallycorrectfeedback", "incorrectfeedback"]

OPTIONS_TABLES = {
    "multichoice": ("qtype_multichoice_options", "questionid"),
    "match": ("qtype_match_options", "questionid"),
    "ordering": ("qtype_ordering_options", "questionid"),
    "randomsamatch": ("qtype_randomsamatch_options", "questionid"),
    "calculated": ("question_calculated_options", "question"),
}
"""Question types whose options table (and its join column) is known"""

NO_FEEDBACK_TYPES = ("multianswer", "numerical", "truefalse", "essay", "shortanswer")


def is_numeric(value):
    if value is None or isinstance(value, bool):
        return False
    try:
        float(value)
    except (TypeError, ValueError):
        return False
    return True


@register_entity("question")
class Question (Entity):
    """A question of the question bank, with its answers, hints and detailed feedbacks."""

    table = "question"

    def define_fields(self):
        if not is_numeric(self.record("questiontext")):
            self.add_field("questiontext")
        self.add_field("generalfeedback")
        qtype = self.record("qtype")
        if qtype in OPTIONS_TABLES:
            table, join = OPTIONS_TABLES[qtype]
            self.link_table(table, join, FEEDBACK_FIELDS)
        elif qtype and qtype not in NO_FEEDBACK_TYPES:
            # plugins name their options table either way
            if self.link_table("qtype_%s" % qtype, "questionid", FEEDBACK_FIELDS) is None:
                self.link_table("question_%s" % qtype, "question", FEEDBACK_FIELDS)
        self.add_entities_from_table("answers", ["answer", "feedback"], "question_answers", "question")
        if qtype == "match":
            self.add_entities_from_table("subquestions", ["questiontext", "answertext"],
                                         "qtype_match_subquestions", "questionid")
        self.add_entities_from_table("hints", ["hint"], "question_hints", "questionid")
