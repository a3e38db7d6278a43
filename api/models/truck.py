from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class TruckCondition(str, Enum):
    NEW = "new"
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"


class FuelType(str, Enum):
    DIESEL = "diesel"
    ELECTRIC = "electric"
    NATURAL_GAS = "natural_gas"
    HYBRID = "hybrid"


class TruckStatus(str, Enum):
    AVAILABLE = "available"
    PENDING = "pending"
    SOLD = "sold"


class TruckPayload(BaseModel):
    """Partial truck listing as sent by callers on create and update.

    Every field is optional and unknown keys are kept, so the payload is passed
    on to the store unchanged. Numbers keep the JSON type they were sent with.
    Enum-valued fields are plain strings here; the store does not reject
    unknown values.
    """

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "make": "Peterbilt",
                "model": "579",
                "year": 2019,
                "price": 85000,
                "mileage": 450000,
                "condition": "excellent",
                "fuel_type": "diesel",
                "features": ["APU", "Navigation System"],
                "location": "Sacramento, CA",
                "latitude": 38.5816,
                "longitude": -121.4944
            }
        }
    )

    # Identity
    make: Optional[str] = Field(None, description="Manufacturer", examples=["Peterbilt"])
    model: Optional[str] = Field(None, description="Model name", examples=["579"])
    year: Optional[Union[int, float]] = Field(None, description="Model year", examples=[2019])
    vin: Optional[str] = None

    # Listing
    price: Optional[Union[int, float]] = Field(None, description="Asking price in dollars", examples=[85000])
    mileage: Optional[Union[int, float]] = Field(None, description="Odometer reading in miles", examples=[450000])
    condition: Optional[str] = Field(None, description="One of new, excellent, good, fair")
    fuel_type: Optional[str] = Field(None, description="One of diesel, electric, natural_gas, hybrid")
    status: Optional[str] = Field(None, description="One of available, pending, sold")
    description: Optional[str] = None

    # Media
    images: Optional[List[str]] = Field(None, description="Image URLs, first one is the thumbnail")
    features: Optional[List[str]] = None

    # Location
    location: Optional[str] = None
    latitude: Optional[Union[int, float]] = None
    longitude: Optional[Union[int, float]] = None

    # Inspection
    company_inspected: Optional[bool] = None
    imperial_inspected: Optional[bool] = Field(None, description="Legacy alias of company_inspected")
    inspection_date: Optional[str] = None
    inspection_notes: Optional[str] = None

    # Metadata
    source: Optional[str] = None

