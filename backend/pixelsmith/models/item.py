"""Item record returned by every generator."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Item(BaseModel):
    type: str
    name: str
    seed: int | float
    item_data: dict[str, Any] = Field(default_factory=dict, alias="itemData")
    image_data_url: str = Field(default="", alias="imageDataUrl")

    # In-process only: the drawn surface and component list
    surface: Any = Field(default=None, exclude=True)
    components: list[Any] = Field(default_factory=list, exclude=True)

    model_config = {"populate_by_name": True}

    @property
    def is_error(self) -> bool:
        return "error" in self.item_data

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
