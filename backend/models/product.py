from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

class ListingCreate(BaseModel):
    product_name: str = Field(..., min_length=1)
    description: Optional[str] = None

    price: float = Field(..., ge=0)

    stock: int = Field(..., ge=0)


class ListingInDB(BaseModel):
    schema_version: int

    product_name: str
    description: Optional[str]

    price: float
    stock: int

    seller_id: str
    image_url: str
    image_public_id: Optional[str] = None

    reviews: List[str] = []

    created_at: datetime
