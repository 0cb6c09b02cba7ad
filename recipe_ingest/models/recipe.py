from __future__ import annotations

from typing import Any, Dict, List, Union
from pydantic import BaseModel, Field

Number = Union[int, float]


class Ingredient(BaseModel):
    name: str
    quantity: Number = 1
    unit: str = ""


class Step(BaseModel):
    order: int
    text: str


class Recipe(BaseModel):
    title: str
    servings: Number = 4
    ingredients: List[Ingredient] = Field(default_factory=list)
    steps: List[Step] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class ExtractionMetadata(BaseModel):
    extracted_at: str = Field(alias="extractedAt")
    model_used: str = Field(alias="modelUsed")

    model_config = {"populate_by_name": True}


class ExtractionResult(BaseModel):
    recipe: Recipe
    downstream_response: Dict[str, Any] = Field(alias="downstreamResponse")
    metadata: ExtractionMetadata

    model_config = {"populate_by_name": True}

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
