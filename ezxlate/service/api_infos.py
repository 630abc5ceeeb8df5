from .api import Api


class ApiInfos (Api):
    """Version of the server and the optional features it allows."""

    def do(self):
        self.answer["version"] = self.version()
        self.answer["previousVerification"] = 1 if self.settings.get("previous") else 0
        self.answer["fieldsExtension"] = 1 if self.settings.get("extend") else 0
        self.answer["gradebook"] = 1 if self.settings.get("gradebook") else 0
