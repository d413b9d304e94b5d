"""Mapping layer.

This package translates between persisted rows (flat ``snake_case``
dicts) and the typed record models, in both directions.
"""

__all__: list[str] = []
