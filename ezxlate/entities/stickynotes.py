from ezxlate.core.entity import Entity, register_entity

COLOR_MEANINGS = ["color%d_meaning" % i for i in range(1, 7)]


@register_entity("stickynotes")
class StickyNotes (Entity):

    table = "stickynotes"

    def define_fields(self):
        self.add_fields("name", "intro", *COLOR_MEANINGS)
        self["name"].gradebook()
        self.add_entities_from_table("columns", ["title"], "stickynotes_column", "stickyid")
