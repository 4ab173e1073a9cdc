"""
Core domain: models, row rules, mapping, classification and record building.
"""
