import click
from flask import Flask
from config import config


def create_app(config_name='default'):
    """Application factory: creates and configures the Flask host for the cart."""
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # ── Logging ───────────────────────────────────────────────────
    from shopcart.utils.logging import setup_logging
    setup_logging(app)

    # ── Cart ──────────────────────────────────────────────────────
    from shopcart.cart.models import CartConfiguration
    cart_config = CartConfiguration.from_mapping(app.config)
    app.logger.info(
        'Cart engine ready: persistence=%s codec=%s max_item=%s max_quantity=%s',
        cart_config.persistence_mode.value, cart_config.codec.value,
        cart_config.cart_max_item, cart_config.item_max_quantity,
    )

    # ── Context Processor ─────────────────────────────────────────
    @app.context_processor
    def inject_cart():
        """Expose the current cart to templates as `cart` (request renders only)."""
        from flask import has_request_context
        from shopcart.cart.host import get_cart
        if not has_request_context():
            return {}
        return {'cart': get_cart()}

    # ── CLI Commands ──────────────────────────────────────────────
    register_commands(app)

    return app


def register_commands(app):
    """Register cart diagnostic Flask CLI commands."""

    @app.cli.command('cart-hash')
    @click.argument('pairs', nargs=-1)
    def cart_hash(pairs):
        """Print the variant hash for key=value attribute pairs."""
        from shopcart.cart.hashing import canonical_attributes, variant_hash
        attributes = {}
        for pair in pairs:
            key, sep, value = pair.partition('=')
            if not sep:
                raise click.BadParameter(f'expected key=value, got {pair!r}', param_hint='PAIRS')
            attributes[key] = value
        click.echo(f'{canonical_attributes(attributes)}  {variant_hash(attributes)}')

    @app.cli.command('cart-decode')
    @click.argument('payload')
    @click.option('--attributes', default='', help='Attribute slot (delimited codec only).')
    @click.option('--codec', 'codec_name', type=click.Choice(['json', 'delimited']),
                  default=None, help='Wire format; defaults to CART_CODEC.')
    def cart_decode(payload, attributes, codec_name):
        """Decode a persisted cart payload and show its contents (diagnostic)."""
        from shopcart.cart.codecs import DelimitedCodec, get_codec
        codec = get_codec(codec_name or app.config['CART_CODEC'])
        store = codec.decode({'': payload, DelimitedCodec.ATTRIBUTE_SLOT: attributes})

        if store.is_empty:
            click.echo('Cart is empty.')
            return
        click.echo(f'{"Item":<12} {"Qty":<6} {"Hash":<34} {"Attributes"}')
        click.echo('─' * 70)
        for variant in store.variants():
            attrs = ', '.join(f'{k}={v}' for k, v in variant.attributes.items())
            click.echo(f'{variant.item_id:<12} {variant.quantity:<6} {variant.hash:<34} {attrs}')
        click.echo('─' * 70)
        click.echo(f'Variants: {store.total_item_count}  '
                   f'Quantity: {store.total_quantity}  '
                   f'Price total: {store.attribute_sum("price")}')
