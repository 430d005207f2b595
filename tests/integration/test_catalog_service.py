"""
Integration tests for the catalog provider and catalog maintenance.
"""

import pytest
from decimal import Decimal
from sqlalchemy import update

from storefront.engine import ProductSnapshot
from storefront.exceptions import DuplicateVariant, InvalidPriceInput, NotFoundError
from storefront.models import Product
from storefront.services import catalog_service
from storefront.services.cache_service import get_cache


class TestSnapshots:
    """Products handed to the engine."""

    def test_snapshot_from_database(self, session, tshirt_id):
        snapshot = catalog_service.get_product_snapshot(session, tshirt_id)

        assert isinstance(snapshot, ProductSnapshot)
        assert snapshot.price == Decimal('80.00')
        assert snapshot.original_price == Decimal('100.00')
        assert [(v.color, v.size, v.stock) for v in snapshot.variants] == [
            ('red', 'M', 5), ('red', 'L', 0), ('blue', 'S', 3), ('blue', 'M', 3),
        ]

    def test_snapshot_is_read_only(self, session, tshirt_id):
        snapshot = catalog_service.get_product_snapshot(session, tshirt_id)

        with pytest.raises(AttributeError):
            snapshot.price = Decimal('1.00')

    def test_missing_product(self, session):
        with pytest.raises(NotFoundError):
            catalog_service.get_product_snapshot(session, 999)

    def test_inactive_product_hidden(self, session, bag_id):
        session.get(Product, bag_id).active = False
        session.flush()

        with pytest.raises(NotFoundError):
            catalog_service.get_product(session, bag_id)


class TestListing:

    def test_discounted_only(self, session, tshirt_id, bag_id):
        products = catalog_service.list_products(session, discounted_only=True)
        assert [p.id for p in products] == [tshirt_id]

    def test_price_range(self, session, tshirt_id, bag_id):
        products = catalog_service.list_products(session, min_price=Decimal('100'), max_price=Decimal('300'))
        assert [p.id for p in products] == [bag_id]

    def test_size_filter(self, session, tshirt_id, bag_id):
        products = catalog_service.list_products(session, size='L')
        assert [p.id for p in products] == [tshirt_id]


class TestMaintenance:

    def test_generate_sku(self):
        assert catalog_service.generate_sku('Basic Tişört', 'Kırmızı', '36') == 'BASICTISOR-KIRMIZI-36'
        assert catalog_service.generate_sku('Bag', '', '') == 'BAG--'

    def test_add_variants_assigns_skus(self, session, bag_id):
        created = catalog_service.add_variants(session, bag_id, 'Siyah', ['S', 'M'], stock=2, barcode='869000')

        assert [v.sku for v in created] == ['CANVASBAG-SIYAH-S', 'CANVASBAG-SIYAH-M']
        assert all(v.barcode == '869000' for v in created)

    def test_duplicate_variant_case_insensitive(self, session, tshirt_id):
        with pytest.raises(DuplicateVariant) as exc_info:
            catalog_service.add_variants(session, tshirt_id, 'RED', ['xl', 'm'])

        assert exc_info.value.to_dict()['sizes'] == ['m']
        # Nothing was added
        assert len(catalog_service.get_product(session, tshirt_id).variants) == 4

    def test_set_variant_stock(self, session, tshirt_id):
        catalog_service.set_variant_stock(session, tshirt_id, 'red', 'L', 7)

        snapshot = catalog_service.get_product_snapshot(session, tshirt_id)
        stock = {(v.color, v.size): v.stock for v in snapshot.variants}
        assert stock[('red', 'L')] == 7

    def test_set_stock_of_missing_variant(self, session, tshirt_id):
        with pytest.raises(NotFoundError):
            catalog_service.set_variant_stock(session, tshirt_id, 'green', 'M', 1)

    def test_update_pricing(self, session, tshirt_id):
        product = catalog_service.update_pricing(session, tshirt_id, Decimal('120.00'), Decimal('150.00'))

        assert product.price == Decimal('120.00')
        assert product.original_price == Decimal('150.00')

    def test_update_pricing_rejects_inverted_prices(self, session, tshirt_id):
        with pytest.raises(InvalidPriceInput):
            catalog_service.update_pricing(session, tshirt_id, Decimal('120.00'), Decimal('100.00'))

    @pytest.mark.parametrize('price,original', [
        (Decimal('120.00'), Decimal('100.00')),
        (Decimal('-1.00'), None),
        ('abc', Decimal('150.00')),
        (Decimal('90.00'), Decimal('-5.00')),
    ])
    def test_rejected_pricing_leaves_product_untouched(self, session, tshirt_id, price, original):
        with pytest.raises(InvalidPriceInput):
            catalog_service.update_pricing(session, tshirt_id, price, original)

        product = session.get(Product, tshirt_id)
        assert product.price == Decimal('80.00')
        assert product.original_price == Decimal('100.00')
        assert product.is_discounted


class InMemoryRedis:
    """Dict-backed stand-in for the few redis client calls the cache makes."""

    def __init__(self):
        self.store = {}

    def ping(self):
        return True

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value

    def delete(self, key):
        self.store.pop(key, None)


@pytest.fixture
def redis_store(app):
    cache = get_cache()
    cache._enabled = True
    cache.client = InMemoryRedis()
    return cache.client.store


class TestCachedSnapshots:
    """Catalog provider with Redis available."""

    def snapshot_key(self, product_id):
        return f'storefront:catalog:product:{product_id}'

    def test_snapshot_is_stored(self, session, redis_store, tshirt_id):
        snapshot = catalog_service.get_product_snapshot(session, tshirt_id)

        assert self.snapshot_key(tshirt_id) in redis_store
        assert snapshot.price == Decimal('80.00')

    def test_second_read_served_from_cache(self, session, redis_store, tshirt_id, mocker):
        spy = mocker.spy(catalog_service, 'get_product')
        catalog_service.get_product_snapshot(session, tshirt_id)

        session.execute(
            update(Product).where(Product.id == tshirt_id).values(price=Decimal('70.00')),
            execution_options={'synchronize_session': False},
        )
        session.commit()
        snapshot = catalog_service.get_product_snapshot(session, tshirt_id)

        assert spy.call_count == 1
        assert snapshot.price == Decimal('80.00')
        assert isinstance(snapshot.price, Decimal)
        assert [(v.color, v.size, v.stock) for v in snapshot.variants][0] == ('red', 'M', 5)

    def test_pricing_update_invalidates(self, session, redis_store, tshirt_id):
        catalog_service.get_product_snapshot(session, tshirt_id)

        catalog_service.update_pricing(session, tshirt_id, Decimal('90.00'), Decimal('100.00'))
        session.commit()

        assert self.snapshot_key(tshirt_id) not in redis_store
        assert catalog_service.get_product_snapshot(session, tshirt_id).price == Decimal('90.00')

    def test_stock_change_invalidates(self, session, redis_store, tshirt_id):
        catalog_service.get_product_snapshot(session, tshirt_id)

        catalog_service.set_variant_stock(session, tshirt_id, 'red', 'L', 4)
        session.commit()

        assert self.snapshot_key(tshirt_id) not in redis_store
        snapshot = catalog_service.get_product_snapshot(session, tshirt_id)
        assert ('red', 'L', 4) in [(v.color, v.size, v.stock) for v in snapshot.variants]

    def test_new_variants_invalidate(self, session, redis_store, tshirt_id):
        catalog_service.get_product_snapshot(session, tshirt_id)

        catalog_service.add_variants(session, tshirt_id, 'green', ['S'], stock=2)
        session.commit()

        assert self.snapshot_key(tshirt_id) not in redis_store
        snapshot = catalog_service.get_product_snapshot(session, tshirt_id)
        assert ('green', 'S', 2) in [(v.color, v.size, v.stock) for v in snapshot.variants]
