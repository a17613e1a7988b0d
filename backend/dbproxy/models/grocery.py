"""
Grocery inventory document model.
"""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

FoodGroup = Literal["fruits", "vegetables", "proteins", "dairy", "grains", "nuts"]


class GroceryItem(BaseModel):
    """
    Inventory item document.

    Validation is strict: numbers must arrive as numbers and flags as booleans.
    Fields outside the model are dropped before the document is stored.
    """
    model_config = ConfigDict(
        strict=True,
        extra="ignore",
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    item: str = Field(..., min_length=1, description="Item name")
    food_group: FoodGroup = Field(..., description="Food group")
    price_in_usd: float = Field(..., description="Unit price in USD")
    quantity: float = Field(..., ge=0, description="Units in stock")
    calories_per_100g: Optional[float] = Field(None, description="Energy per 100g")
    organic: Optional[bool] = None
    wild_caught: Optional[bool] = None
    fat_content: Optional[str] = None
    gluten_free: Optional[bool] = None
    free_range: Optional[bool] = None
