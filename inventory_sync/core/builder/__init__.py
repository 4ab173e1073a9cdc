"""
Canonical record construction.
"""

from .record_builder import BuiltRecord, RecordBuilder, normalize_image_path

__all__ = ["BuiltRecord", "RecordBuilder", "normalize_image_path"]
