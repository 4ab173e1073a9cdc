"""
Cell coercion and pricing fallbacks.
"""

from .pricing import DEFAULT_CATEGORY_PRICES, PricingPolicy
from .type_coercion import to_bool, to_int, to_list, to_number, to_text

__all__ = [
    "PricingPolicy",
    "DEFAULT_CATEGORY_PRICES",
    "to_bool",
    "to_int",
    "to_list",
    "to_number",
    "to_text",
]
