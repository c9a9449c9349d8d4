"""Sutradhar: a Telegram Bot API client with command routing.

Layers:

- :mod:`sutradhar.core`: logging, framework-agnostic.
- :mod:`sutradhar.sdk`: API client, middleware chain, transport, models.
- :mod:`sutradhar.bot`: command registry, dispatcher, routers, poller.
"""

__version__ = "0.1.0"
