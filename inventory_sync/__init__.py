"""
inventory-sync: spreadsheet catalog sync and order reporting pipelines.
"""

__version__ = "1.0.0"
