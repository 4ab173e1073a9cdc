"""
Derived storefront views over the product catalog.
"""

from .materializer import ALL_VIEW, DEFAULT_VIEWS, ViewDefinition, ViewMaterializer

__all__ = ["ViewMaterializer", "ViewDefinition", "DEFAULT_VIEWS", "ALL_VIEW"]
