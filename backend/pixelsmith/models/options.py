"""Generation options: the one typed options record every generator accepts."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class GenerationOptions(BaseModel):
    """Caller options. camelCase aliases match the JSON wire format."""

    sub_type: str | None = Field(
        default=None, alias="subType", description="Item sub-type, validated per item type"
    )
    material: str | None = Field(default=None, description="Main material key")
    grip_material: str | None = Field(default=None, alias="gripMaterial")
    string_material: str | None = Field(default=None, alias="stringMaterial")
    haft_material: str | None = Field(default=None, alias="haftMaterial")
    hilt_material: str | None = Field(default=None, alias="hiltMaterial")
    pommel_material: str | None = Field(default=None, alias="pommelMaterial")
    seed: int | float | None = Field(
        default=None, description="Recorded verbatim; drives the RNG only when enabled"
    )

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @classmethod
    def from_any(cls, options: GenerationOptions | dict[str, Any] | None) -> GenerationOptions:
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        return cls.model_validate(options)
