"""
Unit tests for the favorites set.
"""
from storefront.engine import FavoritesSet


class TestFavoritesSet:

    def test_toggle_returns_membership(self):
        favorites = FavoritesSet()

        assert favorites.toggle(5) is True
        assert 5 in favorites
        assert favorites.toggle(5) is False
        assert 5 not in favorites

    def test_double_toggle_restores_original(self):
        favorites = FavoritesSet([1, 2])

        favorites.toggle(3)
        favorites.toggle(3)

        assert favorites == FavoritesSet([2, 1])

    def test_merge_is_union(self):
        merged = FavoritesSet([1, 2]).merge([2, 3])

        assert len(merged) == 3
        assert set(merged) == {1, 2, 3}

    def test_merge_leaves_original_untouched(self):
        favorites = FavoritesSet([1])
        favorites.merge([9])
        assert 9 not in favorites
