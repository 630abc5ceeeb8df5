from ezxlate.core.entity import Entity, register_entity


@register_entity("quiz")
class Quiz (Entity):
    """Quiz activity: name (mirrored in the gradebook), intro, feedbacks, grade items and section headings."""

    table = "quiz"

    def define_fields(self):
        self.add_fields("name", "intro")
        self["name"].gradebook()
        self.add_entities_from_table("feedback", ["feedbacktext"], "quiz_feedback", "quizid")
        self.add_entities_from_table("grade_items", ["name"], "quiz_grade_items", "quizid")
        self.add_entities_from_table("sections", ["heading"], "quiz_sections", "quizid")
