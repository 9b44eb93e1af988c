"""Shared pydantic base: snake_case in Python, camelCase on the wire."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ScoutModel(BaseModel):
    """Base model for everything that is persisted or sent over HTTP.

    Stored briefs and cache records use camelCase keys, so fields are
    aliased and callers should dump with ``by_alias=True``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
