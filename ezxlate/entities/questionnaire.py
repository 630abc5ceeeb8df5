from ezxlate.core.entity import Entity, register_entity

SURVEY_FIELDS = ["title", "subtitle", "info", "thank_head", "thank_body", "feedbacknotes"]


@register_entity("questionnaire")
class Questionnaire (Entity):
    """Questionnaire activity.

       The texts shown to respondents live in the survey row joined through
       `sid`, with its questions (and their choices) and feedback sections.
    """

    table = "questionnaire"

    def define_fields(self):
        self.add_fields("name", "intro")
        self["name"].gradebook()
        self.link_table("questionnaire_survey", {"id": "sid"}, SURVEY_FIELDS)
        self.add_entities_from_table("questions", "questionnaire_question", "questionnaire_question",
                                     {"surveyid": "sid"})
        self.add_entities_from_table("sections", "questionnaire_section", "questionnaire_fb_sections",
                                     {"surveyid": "sid"})


@register_entity("questionnaire_question")
class QuestionnaireQuestion (Entity):

    table = "questionnaire_question"

    def define_fields(self):
        self.add_fields("name", "content")
        self.add_entities_from_table("choices", ["content"], "questionnaire_quest_choice", "question_id")


@register_entity("questionnaire_section")
class QuestionnaireSection (Entity):

    table = "questionnaire_fb_sections"

    def define_fields(self):
        self.add_fields("sectionlabel", "sectionheading", "feedbacknotes")
