"""Shared pydantic base for API bodies.

Wire format is camelCase (what the game clients send); snake_case field
names are accepted on input as well.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
    )
