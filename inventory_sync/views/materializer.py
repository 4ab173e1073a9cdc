"""
View materializer: derives the storefront's categorized product lists.

Views are recomputed from the full authoritative set on every run; nothing
is patched incrementally.
"""

import re
from typing import Literal

from pydantic import BaseModel, model_validator

from inventory_sync.core.models import CanonicalProduct
from inventory_sync.observability.logger import get_logger

logger = get_logger(__name__)

ALL_VIEW = "all"

Flag = Literal["is_sale", "is_new", "in_stock", "anti_tarnish"]


class ViewDefinition(BaseModel):
    """
    A named product filter.

    A product belongs to the view when ANY configured criterion matches.

    Attributes:
        name: View key in the projection document (e.g. "ringsPage")
        category_contains: Case-insensitive fragment matched at the start of
            a word in the category ("ring" matches "Toe Rings", not
            "Earrings")
        section_equals: Case-insensitive website section
        flag: Boolean product field that must be true
    """

    name: str
    category_contains: str | None = None
    section_equals: str | None = None
    flag: Flag | None = None

    @model_validator(mode="after")
    def has_criterion(self) -> "ViewDefinition":
        if self.name == ALL_VIEW:
            raise ValueError(f"'{ALL_VIEW}' is reserved")
        if not (self.category_contains or self.section_equals or self.flag):
            raise ValueError(f"View '{self.name}' needs at least one criterion")
        return self

    def matches(self, product: CanonicalProduct) -> bool:
        if self.category_contains and re.search(
            rf"(?<![a-z]){re.escape(self.category_contains.lower())}", product.category.lower()
        ):
            return True
        if self.section_equals and self.section_equals.casefold() == product.section.strip().casefold():
            return True
        if self.flag and getattr(product, self.flag):
            return True
        return False


def _page_views() -> list[ViewDefinition]:
    pages = []
    for kind in ("rings", "necklaces", "earrings", "bracelets", "anklets"):
        pages.append(ViewDefinition(
            name=kind,
            category_contains=kind[:-1],
            section_equals=f"{kind.capitalize()} Page",
        ))
    return pages


DEFAULT_VIEWS: list[ViewDefinition] = [
    ViewDefinition(name="featured", category_contains="featured products", section_equals="Featured Products"),
    *_page_views(),
    ViewDefinition(name="collections", section_equals="Collections Page"),
    ViewDefinition(name="ringsPage", section_equals="Rings Page"),
    ViewDefinition(name="necklacesPage", section_equals="Necklaces Page"),
    ViewDefinition(name="earringsPage", section_equals="Earrings Page"),
    ViewDefinition(name="braceletsPage", section_equals="Bracelets Page"),
    ViewDefinition(name="ankletsPage", section_equals="Anklets Page"),
    ViewDefinition(name="onSale", flag="is_sale"),
    ViewDefinition(name="newArrivals", flag="is_new"),
    ViewDefinition(name="inStock", flag="in_stock"),
    ViewDefinition(name="contentCreatorReady", flag="anti_tarnish"),
]


class ViewMaterializer:
    """
    Computes every configured view over the full product set.

    Args:
        views: View definitions (defaults to the storefront views)
    """

    def __init__(self, views: list[ViewDefinition] | None = None):
        self.views = views if views is not None else list(DEFAULT_VIEWS)
        names = [view.name for view in self.views]
        duplicates = {name for name in names if names.count(name) > 1}
        if duplicates:
            raise ValueError(f"Duplicate view names: {sorted(duplicates)}")

    def materialize(self, products: list[CanonicalProduct]) -> dict[str, list[CanonicalProduct]]:
        """Return ``all`` plus each view, preserving the input order."""
        views = {ALL_VIEW: list(products)}
        for view in self.views:
            views[view.name] = [product for product in products if view.matches(product)]

        logger.info(
            f"Materialized {len(views)} views over {len(products)} products",
            extra={"view_sizes": {name: len(items) for name, items in views.items()}},
        )
        return views

    @staticmethod
    def to_document(views: dict[str, list[CanonicalProduct]]) -> dict[str, list[dict]]:
        """Serialize materialized views for the projection document."""
        return {name: [product.to_document() for product in items] for name, items in views.items()}
