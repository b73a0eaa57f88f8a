"""
RocketShoes cart

This package contains the client-side cart state manager:
- cart: cart lines, snapshot storage backends, CartManager
- api: stock and catalog HTTP client
- notifications: user-facing error sinks
- errors: error kinds and the notification table
- i18n: notification texts
- config / logging: environment settings and log setup
"""

__version__ = "0.1.0"
