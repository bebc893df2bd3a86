"""Shared base model for wire-facing contracts."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for contracts that cross the tool boundary.

    Fields are snake_case in Python and camelCase on the wire; either spelling
    is accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
