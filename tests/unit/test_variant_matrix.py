"""
Unit tests for the variant stock index.
"""
from storefront.engine import VariantMatrix, VariantSnapshot


def build(*variants):
    return VariantMatrix(VariantSnapshot(color, size, stock) for color, size, stock in variants)


class TestVariantMatrix:

    def test_colors_in_first_occurrence_order(self):
        matrix = build(('red', 'M', 5), ('blue', 'S', 1), ('red', 'L', 0), ('green', 'S', 2))
        assert matrix.colors() == ['red', 'blue', 'green']

    def test_sizes_for_color(self):
        matrix = build(('red', 'M', 5), ('red', 'L', 0), ('blue', 'S', 1))

        assert matrix.sizes_for_color('red') == ['M', 'L']
        assert matrix.sizes_for_color('blue') == ['S']

    def test_sizes_for_unknown_or_missing_color(self):
        matrix = build(('red', 'M', 5))

        assert matrix.sizes_for_color('purple') == []
        assert matrix.sizes_for_color(None) == []

    def test_all_sizes_deduplicated(self):
        matrix = build(('red', 'M', 5), ('red', 'L', 0), ('blue', 'M', 1), ('blue', 'XL', 1))
        assert matrix.all_sizes() == ['M', 'L', 'XL']

    def test_exact_pair_stock(self):
        matrix = build(('red', 'M', 5), ('red', 'L', 0))

        assert matrix.is_in_stock('red', 'M') is True
        assert matrix.is_in_stock('red', 'L') is False

    def test_unknown_pair_is_not_in_stock(self):
        matrix = build(('red', 'M', 5))

        assert matrix.is_in_stock('blue', 'M') is False
        assert matrix.is_in_stock('red', 'XXL') is False
        assert matrix.is_in_stock(None, 'M') is False
        assert matrix.is_in_stock('red', None) is False

    def test_boolean_stock_flags(self):
        matrix = build(('red', 'M', True), ('red', 'L', False))

        assert matrix.is_in_stock('red', 'M') is True
        assert matrix.is_in_stock('red', 'L') is False

    def test_color_availability(self):
        matrix = build(('red', 'M', 0), ('red', 'L', 3), ('white', 'S', 0))

        assert matrix.is_color_available('red') is True
        assert matrix.is_color_available('white') is False
        assert matrix.is_color_available('black') is False

    def test_duplicate_pair_keeps_first(self):
        matrix = build(('red', 'M', 0), ('red', 'M', 9))

        assert len(matrix) == 1
        assert matrix.is_in_stock('red', 'M') is False

    def test_size_availability(self):
        matrix = build(('red', 'M', 5), ('red', 'L', 0))
        assert matrix.size_availability('red') == [('M', True), ('L', False)]


class TestAxes:
    """Products without a color or size axis."""

    def test_empty_matrix(self):
        matrix = VariantMatrix()

        assert matrix.is_empty
        assert not matrix.has_color_axis
        assert not matrix.has_size_axis
        assert matrix.colors() == []
        assert not matrix.has_stock()

    def test_size_only_product(self):
        matrix = build(('', 'S', 1), (None, 'M', 0))

        assert not matrix.has_color_axis
        assert matrix.has_size_axis
        assert matrix.colors() == []
        assert matrix.is_in_stock('', 'S') is True
        assert matrix.size_availability(None) == [('S', True), ('M', False)]

    def test_color_only_product(self):
        matrix = build(('red', '', 2), ('blue', '', 0))

        assert matrix.has_color_axis
        assert not matrix.has_size_axis
        assert matrix.sizes_for_color('red') == []
        assert matrix.is_in_stock('red', '') is True
        assert matrix.is_in_stock('blue', '') is False

    def test_from_product(self, make_snapshot):
        product = make_snapshot(variants=[('red', 'M', 5), ('blue', 'S', 0)])
        matrix = VariantMatrix.from_product(product)

        assert len(matrix) == 2
        assert matrix.has_stock()
