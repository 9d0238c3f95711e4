"""Domain layer for txintel application.

Services are imported from their modules (``txintel.domain.categorization``,
``txintel.domain.duplicates`` ...) so that importing entities or errors does
not pull in the database layer.
"""
