"""Shared base model for payloads exchanged with the platform API."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """
    Base for every model parsed from (or sent to) the backend.

    The backend speaks camelCase JSON; fields are declared in snake_case and
    accepted under either name. Unknown keys are ignored.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )
