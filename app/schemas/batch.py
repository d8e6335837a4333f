"""
Batch schemas - body and response of POST /batch.

operations is deliberately untyped here: each entry is checked by the
strict action validator so errors can name the operation index and field.
"""

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field

from app.ai.schemas.actions import ActionResult


class BatchRequest(BaseModel):
    """
    Example request body:
    {
        "locationId": "6f1c...",
        "operations": [
            {"type": "add_items", "bin_id": "K7QX2M", "items": ["Tape measure"]},
            {"type": "add_tags", "bin_id": "K7QX2M", "tags": ["tools"]}
        ]
    }
    """
    model_config = ConfigDict(populate_by_name=True)

    location_id: str = Field(..., alias="locationId")
    operations: Any = None


class BatchResponse(BaseModel):
    # results: one entry per operation, in request order
    results: List[ActionResult]
    errors: List[str]
