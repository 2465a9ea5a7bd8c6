"""Shared base for backend wire models."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model that reads and writes camelCase keys on the wire.

    Python code uses snake_case field names; the SkillForge backend speaks
    camelCase JSON.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize as a backend request body."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
