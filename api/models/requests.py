"""
Pydantic models for truck API request bodies.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ImageAssociationRequest(BaseModel):
    """Request to bind uploaded images to a truck once its id is known."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "truckId": "lx2k9a0c3f8d1e7b2a",
                "imageUrls": [
                    "/data/trucks/images/upload_1700000000000_0.jpg",
                    "https://example.com/photos/cab.jpg"
                ]
            }
        }
    )

    truckId: str = Field(..., min_length=1, description="Id of the truck the images belong to")
    imageUrls: List[str] = Field(
        default_factory=list,
        description="Image URLs in display order. Temporary uploads are renamed, others kept as-is."
    )


class LoginRequest(BaseModel):
    """Administrator credentials."""

    username: str
    password: str
