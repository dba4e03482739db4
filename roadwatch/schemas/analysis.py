"""
Image Analysis Schemas
Shape of the structured answer expected from the vision/decision model.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ImageAnalysisData(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    description: str
    damage_level: float = Field(..., alias="damageLevel", ge=0, le=100)
    affected_parts: List[str] = Field(..., alias="affectedParts")
    severity: str
    estimated_cost: float = Field(..., alias="estimatedCost")
    recommendations: List[str]


class ImageAnalysisResult(BaseModel):
    success: bool
    extracted_data: Optional[ImageAnalysisData] = None


# JSON schema sent with the request (response_format.json_schema.schema)
IMAGE_ANALYSIS_JSON_SCHEMA = {
    "type": "object",
    "properties": {
        "description": {"type": "string"},
        "damageLevel": {"type": "number"},
        "affectedParts": {"type": "array", "items": {"type": "string"}},
        "severity": {"type": "string"},
        "estimatedCost": {"type": "number"},
        "recommendations": {"type": "array", "items": {"type": "string"}},
    },
    "required": [
        "description",
        "damageLevel",
        "affectedParts",
        "severity",
        "estimatedCost",
        "recommendations",
    ],
    "additionalProperties": False,
}
