import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator

HHMM_PATTERN = re.compile(r'^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$')


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class Location(BaseModel):
    city: str
    coordinates: Optional[Coordinates] = None

    @field_validator('city')
    @classmethod
    def validate_city(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('City is required')
        return v
