"""
Unit tests for the selection state machine and the CTA decision table.
"""
import pytest
from decimal import Decimal

from storefront.engine import (
    CartLine, CtaState, SelectionStateMachine, SelectionTier, parse_quantity, resolve_cta,
)
from storefront.exceptions import InvalidQuantity, SelectionNotPurchasable

TSHIRT_VARIANTS = [('red', 'M', 5), ('red', 'L', 0), ('blue', 'S', 3)]


@pytest.fixture
def tshirt(make_snapshot):
    return make_snapshot(price='80.00', original_price='100.00', variants=TSHIRT_VARIANTS)


@pytest.fixture
def machine(tshirt):
    return SelectionStateMachine(tshirt)


class TestCtaTable:

    @pytest.mark.parametrize('row,expected', [
        ((False, False, True, True, False, False), CtaState.NEED_COLOR),
        ((False, True, True, True, True, True), CtaState.NEED_COLOR),
        ((True, False, True, True, False, False), CtaState.NEED_SIZE),
        ((True, True, False, True, False, False), CtaState.OUT_OF_STOCK),
        ((True, True, True, False, True, False), CtaState.OUT_OF_STOCK),
        ((True, True, True, True, False, False), CtaState.ADD_TO_CART),
        ((True, True, True, True, True, True), CtaState.UPDATE_DISABLED),
        ((True, True, True, True, True, False), CtaState.UPDATE_ENABLED),
    ])
    def test_first_matching_row_wins(self, row, expected):
        assert resolve_cta(*row) is expected

    def test_enabled_states(self):
        enabled = {state for state in CtaState if state.enabled}
        assert enabled == {CtaState.ADD_TO_CART, CtaState.UPDATE_ENABLED}


class TestTransitions:

    def test_starts_empty(self, machine):
        assert machine.tier is SelectionTier.EMPTY
        assert machine.cta is CtaState.NEED_COLOR
        assert machine.state.quantity == 1

    def test_color_then_size(self, machine):
        assert machine.select_color('red') is SelectionTier.COLOR_CHOSEN
        assert machine.cta is CtaState.NEED_SIZE

        assert machine.select_size('M') is True
        assert machine.tier is SelectionTier.COLOR_AND_SIZE_CHOSEN
        assert machine.cta is CtaState.ADD_TO_CART

    def test_changing_color_drops_size(self, machine):
        machine.select_color('red')
        machine.select_size('M')

        machine.select_color('blue')

        assert machine.state.selected_size is None
        assert machine.tier is SelectionTier.COLOR_CHOSEN

    def test_reselecting_same_color_keeps_size(self, machine):
        machine.select_color('red')
        machine.select_size('M')

        machine.select_color('red')

        assert machine.state.selected_size == 'M'

    def test_clearing_color_returns_to_empty(self, machine):
        machine.select_color('red')
        machine.select_size('M')

        assert machine.select_color(None) is SelectionTier.EMPTY
        assert machine.state.selected_size is None

    def test_size_refused_without_color(self, machine):
        assert machine.select_size('M') is False
        assert machine.state.selected_size is None
        assert machine.cta is CtaState.NEED_COLOR


class TestStockGating:

    def test_sold_out_variant(self, machine):
        machine.select_color('red')
        machine.select_size('L')
        assert machine.cta is CtaState.OUT_OF_STOCK

    def test_unknown_variant_is_out_of_stock(self, machine):
        machine.select_color('blue')
        machine.select_size('XL')
        assert machine.cta is CtaState.OUT_OF_STOCK

    def test_product_flag_overrides_variant_stock(self, make_snapshot):
        machine = SelectionStateMachine(make_snapshot(in_stock=False, variants=[('white', 'M', 4)]))
        machine.select_color('white')
        machine.select_size('M')

        assert machine.is_variant_in_stock is True
        assert machine.cta is CtaState.OUT_OF_STOCK

    def test_single_variant_without_stock(self, make_snapshot):
        machine = SelectionStateMachine(make_snapshot(variants=[('black', 'S', 0)]))
        machine.select_color('black')
        machine.select_size('S')
        assert machine.cta is CtaState.OUT_OF_STOCK


class TestMissingAxes:

    def test_product_without_variants_is_immediately_purchasable(self, make_snapshot):
        machine = SelectionStateMachine(make_snapshot(variants=[]))

        assert machine.is_color_valid and machine.is_size_valid
        assert machine.cta is CtaState.ADD_TO_CART
        selection = machine.resolve()
        assert (selection.color, selection.size) == ('', '')

    def test_product_without_variants_out_of_stock(self, make_snapshot):
        machine = SelectionStateMachine(make_snapshot(in_stock=False, variants=[]))
        assert machine.cta is CtaState.OUT_OF_STOCK

    def test_size_only_product(self, make_snapshot):
        machine = SelectionStateMachine(make_snapshot(variants=[('', 'S', 2), ('', 'M', 0)]))

        assert machine.cta is CtaState.NEED_SIZE
        assert machine.select_size('S') is True
        assert machine.cta is CtaState.ADD_TO_CART

        machine.select_size('M')
        assert machine.cta is CtaState.OUT_OF_STOCK

    def test_color_only_product(self, make_snapshot):
        machine = SelectionStateMachine(make_snapshot(variants=[('red', '', 2)]))

        assert machine.cta is CtaState.NEED_COLOR
        machine.select_color('red')
        assert machine.cta is CtaState.ADD_TO_CART


class TestQuantity:

    @pytest.mark.parametrize('value,expected', [(1, 1), (3, 3), ('7', 7), (' 2 ', 2), (Decimal('4'), 4)])
    def test_parse_valid(self, value, expected):
        assert parse_quantity(value) == expected

    @pytest.mark.parametrize('value', [0, -1, 'abc', '', 2.5, True, None, Decimal('1.5'), '-3', '\u00b2', '++5', '+-2'])
    def test_parse_invalid(self, value):
        with pytest.raises(InvalidQuantity):
            parse_quantity(value)

    def test_invalid_quantity_is_clamped(self, machine):
        machine.set_quantity(4)
        assert machine.set_quantity(0) is False

        assert machine.state.quantity == 1
        assert isinstance(machine.quantity_error, InvalidQuantity)
        assert machine.to_dict()['quantity_error']

    @pytest.mark.parametrize('value', ['²', '++5'])
    def test_non_ascii_or_malformed_digits_are_clamped(self, machine, value):
        assert machine.set_quantity(value) is False

        assert machine.state.quantity == 1
        assert isinstance(machine.quantity_error, InvalidQuantity)

    def test_valid_quantity_clears_error(self, machine):
        machine.set_quantity('x')
        assert machine.set_quantity('3') is True

        assert machine.state.quantity == 3
        assert machine.quantity_error is None

    def test_quantity_does_not_affect_cta(self, machine):
        machine.select_color('red')
        machine.select_size('M')
        machine.set_quantity(50)
        assert machine.cta is CtaState.ADD_TO_CART


class TestEditMode:

    @pytest.fixture
    def line(self):
        return CartLine('line-1', 1, 'red', 'M', 2, Decimal('80.00'))

    def test_opening_preselects_line(self, machine, line):
        machine.open_for_edit(line)

        assert machine.state.edit_mode is True
        assert machine.state.editing_line_id == 'line-1'
        assert (machine.state.selected_color, machine.state.selected_size) == ('red', 'M')
        assert machine.state.quantity == 2
        assert machine.cta is CtaState.UPDATE_DISABLED

    def test_change_enables_update(self, machine, line):
        machine.open_for_edit(line)

        machine.set_quantity(3)
        assert machine.cta is CtaState.UPDATE_ENABLED

        machine.set_quantity(2)
        assert machine.cta is CtaState.UPDATE_DISABLED

    def test_changing_color_in_edit_needs_size(self, machine, line):
        machine.open_for_edit(line)
        machine.select_color('blue')

        assert machine.cta is CtaState.NEED_SIZE
        machine.select_size('S')
        assert machine.cta is CtaState.UPDATE_ENABLED

    def test_stock_still_gates_updates(self, machine, line):
        machine.open_for_edit(line)
        machine.select_size('L')
        assert machine.cta is CtaState.OUT_OF_STOCK


class TestResolve:

    def test_resolve_purchasable_selection(self, machine):
        machine.select_color('red')
        machine.select_size('M')
        machine.set_quantity(2)

        selection = machine.resolve()

        assert selection.key == (1, 'red', 'M')
        assert selection.quantity == 2
        assert selection.unit_price == Decimal('80.00')

    @pytest.mark.parametrize('color,size,expected', [
        (None, None, CtaState.NEED_COLOR),
        ('red', None, CtaState.NEED_SIZE),
        ('red', 'L', CtaState.OUT_OF_STOCK),
    ])
    def test_resolve_refuses_disabled_cta(self, machine, color, size, expected):
        machine.select_color(color)
        machine.select_size(size)

        with pytest.raises(SelectionNotPurchasable) as exc_info:
            machine.resolve()

        assert exc_info.value.cta_state is expected
        assert exc_info.value.to_dict()['cta'] == expected.value

    def test_unchanged_edit_cannot_be_committed(self, machine):
        machine.open_for_edit(CartLine('line-1', 1, 'red', 'M', 2, Decimal('80.00')))

        with pytest.raises(SelectionNotPurchasable):
            machine.resolve()

    def test_to_dict(self, machine):
        machine.select_color('red')
        data = machine.to_dict()

        assert data['tier'] == 'color_chosen'
        assert data['cta'] == 'NeedSize'
        assert data['cta_enabled'] is False
