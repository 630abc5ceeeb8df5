from ezxlate.core.entity import Entity, register_entity


@register_entity("tag")
class Tag (Entity):

    table = "tag"

    def define_fields(self):
        self.add_fields("rawname", "description")
