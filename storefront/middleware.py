"""Middleware for shopper identification."""
import uuid

from flask import session, g

SHOPPER_SESSION_KEY = 'shopper_key'


def load_shopper():
    """
    Load the current shopper key into g (Flask's per-request global).

    Called before each request. Guests get a random key on first visit that
    is kept in the signed session cookie; carts and favorites hang off it.
    """
    shopper_key = session.get(SHOPPER_SESSION_KEY)
    if not shopper_key:
        shopper_key = uuid.uuid4().hex
        session[SHOPPER_SESSION_KEY] = shopper_key
        session.permanent = True
    g.shopper_key = shopper_key
