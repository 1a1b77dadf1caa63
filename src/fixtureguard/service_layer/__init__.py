"""Service layer: the test lifecycle around fixtures and isolation."""
