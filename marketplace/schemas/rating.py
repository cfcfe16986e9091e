# marketplace/schemas/rating.py
from pydantic import BaseModel, Field
from typing import Optional


class RatingSubmit(BaseModel):
    request_id: str
    # Range is checked against settings.RATING_MIN/RATING_MAX in the service
    stars: int
    text: Optional[str] = Field(None, max_length=5000)
    name: Optional[str] = Field(None, max_length=200)
