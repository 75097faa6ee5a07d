"""Base model for configuration payloads.

Every configuration model inherits from :class:`SimBaseModel` which
provides:

* ``alias_generator=to_camel`` so the camelCase keys of ``simvars.json``
  (``intervalMs``, ``derivedFrom``, ``randomWalk``) map automatically to
  snake_case fields.
* A ``model_validator(mode="before")`` that drops explicit ``null`` values
  so the field default is used instead.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class SimBaseModel(BaseModel):
    """Frozen, camelCase-aliased base for configuration models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return {key: value for key, value in values.items() if value is not None}
