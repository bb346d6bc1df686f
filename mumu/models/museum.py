"""Museum catalog model"""
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class Museum(BaseModel):
    """Museum record matching the Supabase museums table / museums.csv schema"""
    museum_id: str = Field(..., min_length=1)
    name: str
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    city: str = ""
    state: Optional[str] = None
    country: str = ""
    address: Optional[str] = None
    website_url: Optional[str] = None
    opening_hours: Optional[str] = None
    has_full_content: bool = False
    highlight: bool = Field(default=False, description="Flagged as a must-visit museum")
    tags: Optional[str] = None

    model_config = {"frozen": True, "extra": "ignore", "from_attributes": True}

    @field_validator("has_full_content", "highlight", mode="before")
    @classmethod
    def parse_csv_bool(cls, v):
        """CSV exports carry TRUE/FALSE strings and NULL columns"""
        if v is None:
            return False
        if isinstance(v, str):
            return v.strip().lower() == "true"
        return v
