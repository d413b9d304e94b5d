"""State/store layer.

This package is the single source of truth for the entity collections the
presentation layer renders. Only sync operations and loaders feed it,
after the data service confirmed the change.
"""
