"""Shared pydantic base for API-facing models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model serialized with camelCase keys, constructible by field name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
