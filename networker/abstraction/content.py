from enum import Enum


class ContentType(Enum):
    """Declared body encoding. Picks both the serializer and the Content-Type header."""

    JSON = "application/json"
    XML = "application/xml"
    TEXT = "text/plain"
    FORM = "application/x-www-form-urlencoded"

    @property
    def mime(self) -> str:
        return self.value
