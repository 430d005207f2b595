"""Favorites membership set."""
from typing import Hashable, Iterable


class FavoritesSet:
    """Toggle-able set of product ids. Iteration order is not meaningful."""

    def __init__(self, product_ids: Iterable[Hashable] = ()):
        self._ids = set(product_ids)

    def toggle(self, product_id: Hashable) -> bool:
        """Flip membership and return the new state (True = now a favorite)."""
        if product_id in self._ids:
            self._ids.discard(product_id)
            return False
        self._ids.add(product_id)
        return True

    def merge(self, other: Iterable[Hashable]) -> 'FavoritesSet':
        return FavoritesSet(self._ids | set(other))

    def __contains__(self, product_id):
        return product_id in self._ids

    def __iter__(self):
        return iter(self._ids)

    def __len__(self):
        return len(self._ids)

    def __eq__(self, other):
        if isinstance(other, FavoritesSet):
            return self._ids == other._ids
        return NotImplemented

    def __repr__(self):
        return f"<FavoritesSet(size={len(self._ids)})>"
