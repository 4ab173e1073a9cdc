"""
Canonical record builder: validated SourceRow -> CanonicalProduct.
"""

from datetime import datetime
from typing import Callable, Iterable

from pydantic import BaseModel, Field

from inventory_sync.core.classification import (
    DEFAULT_COLOR_KEYWORDS,
    DEFAULT_SIZE_KEYWORDS,
    reconcile,
)
from inventory_sync.core.coercion import PricingPolicy, to_bool, to_int, to_list, to_number, to_text
from inventory_sync.core.errors import RecordBuildError
from inventory_sync.core.models import CanonicalProduct, SourceRow
from inventory_sync.core.models.sync_run import utc_now

NUMBER_FIELDS = ("price", "original_price", "discount_percent", "cost_price", "weight", "rating")
INT_FIELDS = ("reviews_count", "stock_quantity", "minimum_stock")
BOOL_FIELDS = ("in_stock", "is_new", "is_sale", "anti_tarnish")
LIST_FIELDS = ("variants", "features", "tags")
TEXT_FIELDS = (
    "category", "section", "description", "material", "style", "occasion",
    "care_instructions", "sku", "brand", "collection", "seo_title",
    "seo_description", "uniqueness_factor", "social_media_tags", "instagram_hashtags",
)
IMAGE_COLUMNS = ("main_image", "image_2", "image_3", "image_4")

DEFAULT_BRAND = "Nurvi Jewel"
DEFAULT_IMAGE_PREFIX = "/images/products/"


class BuiltRecord(BaseModel):
    """
    A canonical product plus the fields the source actually supplied.

    On update only ``supplied_fields`` overwrite the stored record; fields
    whose columns were absent keep their stored values.
    """

    product: CanonicalProduct
    supplied_fields: set[str] = Field(default_factory=set)

    @property
    def product_id(self) -> str:
        return self.product.product_id


def normalize_image_path(path: str, prefix: str = DEFAULT_IMAGE_PREFIX) -> str:
    """
    Point bare image references at the storefront image directory.

    "ring.jpg" -> "/images/products/ring.jpg",
    "/products/ring.jpg" -> "/images/products/ring.jpg".
    URLs and paths already under /images/ are left alone.
    """
    if not path:
        return ""
    if path.startswith(("http://", "https://", "//", "/images/")):
        return path
    if path.startswith("/products/"):
        return "/images" + path
    if not path.startswith("/"):
        return prefix.rstrip("/") + "/" + path
    return path


class RecordBuilder:
    """
    Builds canonical products from validated rows.

    Coerces every mapped cell, routes colors/sizes through the field
    classifier, normalizes image paths and applies the pricing policy.

    Args:
        pricing: Default price table and sale markup
        color_keywords: Keywords that mark a token as a color
        size_keywords: Keywords that mark a token as a size
        default_brand: Brand for rows without one
        image_prefix: Directory bare image names are resolved against
        delimiter: Separator of multi-valued cells
        clock: Returns the current time (timestamps for new records)
    """

    def __init__(
        self,
        pricing: PricingPolicy | None = None,
        color_keywords: Iterable[str] = DEFAULT_COLOR_KEYWORDS,
        size_keywords: Iterable[str] = DEFAULT_SIZE_KEYWORDS,
        default_brand: str = DEFAULT_BRAND,
        image_prefix: str = DEFAULT_IMAGE_PREFIX,
        delimiter: str = "|",
        clock: Callable[[], datetime] = utc_now,
    ):
        self.pricing = pricing or PricingPolicy()
        self.color_keywords = tuple(color_keywords)
        self.size_keywords = tuple(size_keywords)
        self.default_brand = default_brand
        self.image_prefix = image_prefix
        self.delimiter = delimiter
        self.clock = clock

    def build(self, row: SourceRow) -> BuiltRecord:
        """
        Build one product.

        Raises:
            RecordBuildError: The row has no identifier or no name
        """
        product_id = to_text(row.values.get("product_id"))
        name = to_text(row.values.get("name"))
        if not product_id:
            raise RecordBuildError(f"Row {row.row_number}: product id is required")
        if not name:
            raise RecordBuildError(f"Row {row.row_number}: product name is required")

        present = set(row.values)
        values = row.values
        data: dict = {"product_id": product_id, "name": name}
        supplied = {"product_id", "name"}

        for field in TEXT_FIELDS:
            data[field] = to_text(values.get(field))
        for field in NUMBER_FIELDS:
            data[field] = to_number(values.get(field))
        for field in INT_FIELDS:
            data[field] = to_int(values.get(field))
        for field in BOOL_FIELDS:
            data[field] = to_bool(values.get(field))
        for field in LIST_FIELDS:
            data[field] = to_list(values.get(field), self.delimiter)
        supplied |= present & set(TEXT_FIELDS + NUMBER_FIELDS + INT_FIELDS + BOOL_FIELDS + LIST_FIELDS)

        if present & {"colors", "sizes"}:
            lists = reconcile(
                values.get("colors"),
                values.get("sizes"),
                self.color_keywords,
                self.size_keywords,
                self.delimiter,
            )
            data["colors"] = lists.colors
            data["sizes"] = lists.sizes
            supplied |= {"colors", "sizes"}

        if present & set(IMAGE_COLUMNS):
            images = [
                normalize_image_path(to_text(values.get(column)), self.image_prefix)
                for column in IMAGE_COLUMNS
            ]
            data["main_image"] = images[0]
            data["images"] = [image for image in images if image]
            supplied |= {"main_image", "images"}

        if not data["brand"]:
            data["brand"] = self.default_brand
        if not data["tags"] and data["collection"]:
            data["tags"] = to_list(data["collection"], self.delimiter)
            if "collection" in present:
                supplied.add("tags")

        price = self.pricing.resolve_price(data["price"], data["category"])
        if price != data["price"] and "category" in present:
            supplied.add("price")
        data["price"] = price

        original_price = self.pricing.resolve_original_price(
            data["price"], data["original_price"], data["is_sale"]
        )
        if original_price != data["original_price"] and "is_sale" in present:
            supplied.add("original_price")
        data["original_price"] = original_price

        now = self.clock()
        data["date_added"] = now
        data["last_updated"] = now

        try:
            product = CanonicalProduct(**data)
        except ValueError as e:
            raise RecordBuildError(f"Row {row.row_number}: {e}") from e
        return BuiltRecord(product=product, supplied_fields=supplied)
