"""
CanonicalProduct model: the authoritative catalog representation of a product.
"""

import hashlib
import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

# Fields that never take part in content comparison
TIMESTAMP_FIELDS = frozenset({"date_added", "last_updated"})


class CanonicalProduct(BaseModel):
    """
    Authoritative product record, independent of the source spreadsheet layout.

    Serialized to the storefront document with camelCase keys
    (``model_dump(by_alias=True)``); parsing accepts either the alias or the
    field name, so a product round-trips through the projection document.

    Attributes:
        product_id: Stable business key, never reassigned
        date_added: Set on first insert, preserved on every update
        last_updated: Refreshed on every successful upsert
    """

    product_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: str = ""
    section: str = ""

    price: float = 0.0
    original_price: float = 0.0
    discount_percent: float = 0.0
    cost_price: float = 0.0

    main_image: str = ""
    images: list[str] = Field(default_factory=list, max_length=4)

    description: str = ""
    material: str = ""
    weight: float = 0.0
    colors: list[str] = Field(default_factory=list)
    sizes: list[str] = Field(default_factory=list)
    variants: list[str] = Field(default_factory=list)
    style: str = ""
    occasion: str = ""
    features: list[str] = Field(default_factory=list)
    care_instructions: str = ""

    rating: float = 0.0
    reviews_count: int = 0

    in_stock: bool = False
    is_new: bool = False
    is_sale: bool = False
    anti_tarnish: bool = False

    sku: str = ""
    brand: str = ""
    collection: str = ""
    tags: list[str] = Field(default_factory=list)
    seo_title: str = ""
    seo_description: str = ""

    uniqueness_factor: str = ""
    social_media_tags: str = ""
    instagram_hashtags: str = ""

    stock_quantity: int = 0
    minimum_stock: int = 0

    date_added: datetime | None = None
    last_updated: datetime | None = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "productId": "NJ-RNG-001",
                "name": "Rose Gold Solitaire Ring",
                "category": "Rings",
                "section": "Rings Page",
                "price": 1500.0,
                "originalPrice": 1875.0,
                "colors": ["Rose Gold"],
                "sizes": ["Adjustable"],
                "isSale": True,
                "inStock": True,
            }
        }

    def content(self) -> dict[str, Any]:
        """Field values without the bookkeeping timestamps."""
        return self.model_dump(mode="json", exclude=set(TIMESTAMP_FIELDS))

    def checksum(self) -> str:
        """
        MD5 checksum of the product content (timestamps excluded).

        Two syncs of an unchanged source produce the same checksum.
        """
        data_str = json.dumps(self.content(), sort_keys=True)
        return hashlib.md5(data_str.encode()).hexdigest()

    def to_document(self) -> dict[str, Any]:
        """JSON-ready camelCase mapping used by the projection and backups."""
        return self.model_dump(mode="json", by_alias=True)
