import pytest
from decimal import Decimal

from storefront import create_app
from storefront.database import create_all, get_session
from storefront.engine import ProductSnapshot, VariantSnapshot
from storefront.services import catalog_service


def _snapshot(price='80.00', original_price='100.00', in_stock=True, variants=(), product_id=1):
    """Build an in-memory product for engine tests: variants are (color, size, stock)."""
    return ProductSnapshot(
        id=product_id,
        name='Test Product',
        price=Decimal(price) if price is not None else None,
        original_price=Decimal(original_price) if original_price is not None else None,
        in_stock=in_stock,
        variants=tuple(VariantSnapshot(color, size, stock) for color, size, stock in variants),
    )


@pytest.fixture
def make_snapshot():
    """Factory for in-memory product snapshots."""
    return _snapshot


@pytest.fixture(scope='function')
def app():
    """Create application instance for testing (fresh in-memory database)."""
    app = create_app('config.TestConfig')
    with app.app_context():
        create_all()
        yield app


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Create database session for testing."""
    session = get_session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(scope='function')
def tshirt_id(session):
    """Discounted t-shirt: red M in stock, red L sold out, blue S/M in stock."""
    product = catalog_service.create_product(
        session, 'Basic T-Shirt', Decimal('80.00'), Decimal('100.00')
    )
    catalog_service.add_variants(session, product.id, 'red', ['M'], stock=5)
    catalog_service.add_variants(session, product.id, 'red', ['L'], stock=0)
    catalog_service.add_variants(session, product.id, 'blue', ['S', 'M'], stock=3)
    session.commit()
    return product.id


@pytest.fixture(scope='function')
def bag_id(session):
    """Product without variants, sold at full price."""
    product = catalog_service.create_product(session, 'Canvas Bag', Decimal('250.00'))
    session.commit()
    return product.id


@pytest.fixture(scope='function')
def sold_out_id(session):
    """Product flagged out of stock even though a variant has units."""
    product = catalog_service.create_product(
        session, 'Linen Shirt', Decimal('100.00'), Decimal('150.00'), in_stock=False
    )
    catalog_service.add_variants(session, product.id, 'white', ['M'], stock=4)
    session.commit()
    return product.id
