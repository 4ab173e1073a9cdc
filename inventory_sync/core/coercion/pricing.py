"""
Pricing policy for products the catalog lists without a usable price.
"""

from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, Field

DEFAULT_CATEGORY_PRICES = {
    "rings": 1500.0,
    "necklaces": 2500.0,
    "earrings": 1200.0,
    "bracelets": 1800.0,
    "anklets": 1000.0,
    "featured": 2000.0,
}


class PricingPolicy(BaseModel):
    """
    Category default prices and the sale markup.

    Attributes:
        category_prices: Lower-cased category fragment -> default price;
            the longest fragment contained in the category wins, so
            "earrings" beats "rings"
        fallback_price: Price when no fragment matches
        sale_markup: original_price = round(price * sale_markup) for sale
            items listed without an original price
    """

    category_prices: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_CATEGORY_PRICES))
    fallback_price: float = Field(default=1500.0, ge=0)
    sale_markup: float = Field(default=1.25, gt=0)

    def default_price(self, category: str) -> float:
        key = (category or "").lower()
        matches = [fragment for fragment in self.category_prices if fragment.lower() in key]
        if not matches:
            return self.fallback_price
        return self.category_prices[max(matches, key=len)]

    def resolve_price(self, price: float, category: str) -> float:
        return price if price > 0 else self.default_price(category)

    def resolve_original_price(self, price: float, original_price: float, is_sale: bool) -> float:
        if is_sale and original_price <= 0:
            marked_up = Decimal(str(price)) * Decimal(str(self.sale_markup))
            return float(marked_up.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        return original_price
