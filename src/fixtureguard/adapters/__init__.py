"""Concrete implementations of the fixtureguard ports."""
