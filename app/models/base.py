"""Shared base for API models.

Python attributes and ``candidates`` columns are snake_case; the JSON
contract with the front-end is camelCase.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """BaseModel that reads either casing and serializes camelCase by alias."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
