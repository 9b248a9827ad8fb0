"""
shopcart/cart/host.py
---------------------
Flask glue: build the CartEngine for the current request.

    from shopcart.cart.host import get_cart

    @bp.route('/cart/add', methods=['POST'])
    def add():
        result = get_cart().add(request.form['id'], request.form.get('qty'))
        ...

The engine is cached on flask.g, so every call within one request shares
the same in-memory cart.
"""
from flask import current_app, g, has_request_context, request

from shopcart.cart.adapters import CookieAdapter, PersistenceAdapter, SessionAdapter
from shopcart.cart.engine import CartEngine, cart_identity
from shopcart.cart.models import CartConfiguration, PersistenceMode


def cart_seed() -> str | None:
    """CART_ID_SEED if configured, else the request host, else None."""
    seed = current_app.config.get('CART_ID_SEED')
    if seed:
        return seed
    if has_request_context():
        return request.host or None
    return None


def make_adapter(config: CartConfiguration) -> PersistenceAdapter:
    if config.persistence_mode is PersistenceMode.COOKIE:
        return CookieAdapter(max_age=config.cookie_max_age, path=config.cookie_path)
    return SessionAdapter()


def get_cart() -> CartEngine:
    """Return the cart engine for this request, creating it on first use."""
    if 'cart' not in g:
        config = CartConfiguration.from_mapping(current_app.config)
        g.cart = CartEngine(
            make_adapter(config),
            config,
            cart_id=cart_identity(cart_seed()),
        )
    return g.cart
