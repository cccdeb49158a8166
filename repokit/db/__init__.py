"""
Database access: models, providers, conditions and filter objects.
"""
