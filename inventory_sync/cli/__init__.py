"""
Command-line entry points (inventory-sync, inventory-report).
"""
