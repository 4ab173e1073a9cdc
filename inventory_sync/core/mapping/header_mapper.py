"""
Header mapping: resolves raw spreadsheet headers to canonical field names.

Catalog spreadsheets are hand-maintained, so the same column shows up as
"Product ID", "Product_ID" or "Price (â\\x82¹)" (a rupee sign that went
through a latin-1 round trip). Headers are normalized, then looked up in a
synonym table; anything unresolved is dropped.
"""

import re
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, Field

from inventory_sync.core.models import SourceRow
from inventory_sync.observability.logger import get_logger

logger = get_logger(__name__)

REQUIRED_FIELDS = ("product_id", "name")

# Canonical source fields a header may resolve to. image_2..image_4 are
# folded into CanonicalProduct.images by the record builder.
SOURCE_FIELDS = frozenset({
    "product_id", "name", "category", "section",
    "price", "original_price", "discount_percent", "cost_price",
    "main_image", "image_2", "image_3", "image_4",
    "description", "material", "weight",
    "colors", "sizes", "variants",
    "style", "occasion", "features", "care_instructions",
    "rating", "reviews_count",
    "in_stock", "is_new", "is_sale", "anti_tarnish",
    "sku", "brand", "collection", "tags", "seo_title", "seo_description",
    "uniqueness_factor", "social_media_tags", "instagram_hashtags",
    "stock_quantity", "minimum_stock",
})

# Normalized header -> canonical field.
DEFAULT_SYNONYMS: dict[str, str] = {
    "product id": "product_id",
    "id": "product_id",
    "product code": "product_id",
    "product name": "name",
    "name": "name",
    "category": "category",
    "website section": "section",
    "section": "section",
    "price (₹)": "price",
    "price": "price",
    "selling price": "price",
    "original price (₹)": "original_price",
    "original price": "original_price",
    "mrp": "original_price",
    "discount %": "discount_percent",
    "discount percent": "discount_percent",
    "discount": "discount_percent",
    "cost price (₹)": "cost_price",
    "cost price": "cost_price",
    "main image url": "main_image",
    "main image": "main_image",
    "image 2 url": "image_2",
    "image 2": "image_2",
    "image 3 url": "image_3",
    "image 3": "image_3",
    "image 4 url": "image_4",
    "image 4": "image_4",
    "description": "description",
    "material": "material",
    "weight (grams)": "weight",
    "weight grams": "weight",
    "weight": "weight",
    # The catalog keeps real sizes under "Length/Size" and variants under
    # "Sizes Available".
    "length/size": "sizes",
    "length size": "sizes",
    "sizes": "sizes",
    "colors available": "colors",
    "colours available": "colors",
    "colors": "colors",
    "colours": "colors",
    "sizes available": "variants",
    "product variants": "variants",
    "variants": "variants",
    "style": "style",
    "occasion": "occasion",
    "features": "features",
    "care instructions": "care_instructions",
    "rating": "rating",
    "reviews count": "reviews_count",
    "reviews": "reviews_count",
    "in stock": "in_stock",
    "is new": "is_new",
    "is sale": "is_sale",
    "on sale": "is_sale",
    "anti tarnish": "anti_tarnish",
    "sku": "sku",
    "brand": "brand",
    "collection": "collection",
    "tags": "tags",
    "seo title": "seo_title",
    "seo description": "seo_description",
    "uniqueness factor": "uniqueness_factor",
    "social media tags": "social_media_tags",
    "instagram hashtags": "instagram_hashtags",
    "stock quantity": "stock_quantity",
    "stock": "stock_quantity",
    "minimum stock": "minimum_stock",
}

_PARENTHETICAL = re.compile(r"\s*\([^)]*\)\s*$")
_SEPARATORS = re.compile(r"[_\-\s]+")


def repair_mojibake(text: str) -> str:
    """
    Undo UTF-8 text that was decoded as cp1252 or latin-1.

    "Price (â\\x82¹)" -> "Price (₹)". Text that is not mojibake is
    returned unchanged.
    """
    for encoding in ("cp1252", "latin-1"):
        try:
            repaired = text.encode(encoding).decode("utf-8")
        except (UnicodeEncodeError, UnicodeDecodeError):
            continue
        if repaired != text:
            return repaired
    return text


def normalize_header(header: Any) -> str:
    """Mojibake repair, case-fold, '_'/'-' to spaces, whitespace collapsed."""
    if header is None:
        return ""
    text = repair_mojibake(str(header))
    return _SEPARATORS.sub(" ", text.casefold()).strip()


class HeaderMapping(BaseModel):
    """
    Result of mapping one header row.

    Attributes:
        columns: Column index -> canonical field
        ignored: Raw headers that did not resolve (or duplicated a field)
        missing_required: Required canonical fields with no matching header
    """

    columns: dict[int, str] = Field(default_factory=dict)
    ignored: list[str] = Field(default_factory=list)
    missing_required: list[str] = Field(default_factory=list)

    @property
    def fields(self) -> set[str]:
        return set(self.columns.values())

    def to_source_row(self, row_number: int, cells: list[Any] | tuple[Any, ...]) -> SourceRow:
        """Turn a positional row into a SourceRow holding only mapped fields."""
        values = {
            field: cells[index] if index < len(cells) else None
            for index, field in self.columns.items()
        }
        return SourceRow(row_number=row_number, values=values)


class HeaderMapper:
    """
    Resolves raw headers through a synonym table.

    Args:
        synonyms: Extra raw header -> canonical field entries, merged over
            the defaults (keys are normalized before use)
    """

    def __init__(self, synonyms: Mapping[str, str] | None = None):
        self.synonyms = dict(DEFAULT_SYNONYMS)
        for raw, field in (synonyms or {}).items():
            if field not in SOURCE_FIELDS:
                raise ValueError(f"Synonym '{raw}' targets unknown field '{field}'")
            self.synonyms[normalize_header(raw)] = field

    def resolve(self, header: Any) -> str | None:
        """Canonical field for one raw header, or None."""
        key = normalize_header(header)
        if not key:
            return None
        if key in self.synonyms:
            return self.synonyms[key]
        stripped = _PARENTHETICAL.sub("", key)
        return self.synonyms.get(stripped)

    def map_headers(self, headers: Iterable[Any]) -> HeaderMapping:
        mapping = HeaderMapping()
        seen: set[str] = set()

        for index, header in enumerate(headers):
            field = self.resolve(header)
            if field is None or field in seen:
                if header not in (None, ""):
                    mapping.ignored.append(str(header))
                continue
            seen.add(field)
            mapping.columns[index] = field

        mapping.missing_required = [f for f in REQUIRED_FIELDS if f not in seen]

        if mapping.ignored:
            logger.info(f"Ignoring unmapped headers: {mapping.ignored}")
        if mapping.missing_required:
            logger.warning(
                f"Required columns not found: {mapping.missing_required}",
                extra={"missing_required": mapping.missing_required},
            )
        return mapping
