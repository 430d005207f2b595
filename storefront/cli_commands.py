"""
Flask CLI commands for catalog maintenance.

Commands:
- flask init-db: Create all tables
- flask seed-catalog: Load demo products with variants
- flask add-variants: Add a color with its sizes to a product
- flask merge-shopper: Move one shopper's cart and favorites into another's
"""

from decimal import Decimal

import click
from storefront.database import create_all, get_session
from storefront.exceptions import StorefrontError
from storefront.services import cart_service, catalog_service, favorites_service

DEMO_CATALOG = [
    {
        'name': 'Basic Tişört',
        'price': Decimal('80.00'),
        'original_price': Decimal('100.00'),
        'variants': [
            ('Kırmızı', ['S', 'M', 'L'], 5),
            ('Siyah', ['M', 'L', 'XL'], 12),
        ],
    },
    {
        'name': 'Slim Fit Jean',
        'price': Decimal('1249.90'),
        'original_price': None,
        'variants': [
            ('Mavi', ['30', '32', '34'], 3),
        ],
    },
    {
        'name': 'Keten Gömlek',
        'price': Decimal('100.00'),
        'original_price': Decimal('150.00'),
        'variants': [
            ('Beyaz', ['S', 'M'], 0),
            ('Bej', ['M'], 2),
        ],
    },
]


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create database tables."""
        create_all()
        click.echo(click.style('Tables created.', fg='green'))

    @app.cli.command('seed-catalog')
    def seed_catalog():
        """Insert the demo catalog."""
        db_session = get_session()
        try:
            for item in DEMO_CATALOG:
                product = catalog_service.create_product(
                    db_session, item['name'], item['price'], item['original_price']
                )
                for color, sizes, stock in item['variants']:
                    catalog_service.add_variants(db_session, product.id, color, sizes, stock=stock)
                click.echo(f'   {product.id}: {product.name}')
            db_session.commit()
        except StorefrontError as e:
            db_session.rollback()
            click.echo(click.style(f'Seed failed: {e.message}', fg='red'))
            return
        click.echo(click.style(f'\n{len(DEMO_CATALOG)} products seeded.', fg='green', bold=True))

    @app.cli.command('add-variants')
    @click.option('--product-id', type=int, required=True, help='Product ID')
    @click.option('--color', required=True, help='Color name')
    @click.option('--sizes', required=True, help='Comma separated sizes, e.g. S,M,L')
    @click.option('--stock', type=int, default=10, show_default=True, help='Stock per size')
    @click.option('--out-of-stock', is_flag=True, help='Create the variants with zero stock')
    @click.option('--barcode', default=None, help='Optional barcode shared by the variants')
    def add_variants(product_id, color, sizes, stock, out_of_stock, barcode):
        """Add one variant per size under a color."""
        size_list = [size.strip() for size in sizes.split(',') if size.strip()]
        db_session = get_session()
        try:
            created = catalog_service.add_variants(
                db_session, product_id, color, size_list,
                stock=0 if out_of_stock else stock,
                barcode=barcode,
            )
            db_session.commit()
        except StorefrontError as e:
            db_session.rollback()
            click.echo(click.style(f'{e.message}', fg='red'))
            return

        for variant in created:
            click.echo(f'   {variant.sku} stock={variant.stock}')

    @app.cli.command('merge-shopper')
    @click.option('--from-key', required=True, help='Shopper key to merge from (guest)')
    @click.option('--to-key', required=True, help='Shopper key to merge into')
    def merge_shopper(from_key, to_key):
        """Merge a guest's cart and favorites into another shopper."""
        db_session = get_session()
        try:
            lines = cart_service.merge_carts(db_session, from_key, to_key)
            favorites = favorites_service.merge_favorites(db_session, from_key, to_key)
            db_session.commit()
        except StorefrontError as e:
            db_session.rollback()
            click.echo(click.style(f'{e.message}', fg='red'))
            return

        click.echo(click.style(
            f'Merged: {len(lines)} cart line(s), {len(favorites)} favorite(s).', fg='green'
        ))
