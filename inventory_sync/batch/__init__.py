"""
Inventory sync batch pipeline.
"""

from .pipeline import SyncOrchestrator

__all__ = ["SyncOrchestrator"]
