from ezxlate.core.entity import Entity, register_entity


@register_entity("section")
class Section (Entity):

    table = "course_sections"

    def define_fields(self):
        self.add_field("sectionid:id").only_get()
        self.add_field("section").only_get()
        self.add_fields("name", "summary")
