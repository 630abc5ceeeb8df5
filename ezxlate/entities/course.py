from ezxlate.core.entity import Entity, register_entity


@register_entity("course")
class Course (Entity):
    """A course: its names and summary, and (read only) its sections."""

    table = "course"

    def define_fields(self):
        self.add_field("courseid:id").only_get()
        self.add_field("shortname").only_get()
        self.add_fields("fullname", "summary")
        self.add_entities_from_table("sections", "section", "course_sections", {"course": "id"}).only_get()
