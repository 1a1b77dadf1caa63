"""Entry points: the pytest plugin and the ``fixtureguard`` CLI."""
