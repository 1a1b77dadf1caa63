"""fixtureguard test suite.

Folder taxonomy
- unit/         : Fast checks of a single module against fakes; no database.
- integration/  : Real SQLite (and Postgres when Docker is up) and pytest itself.
- e2e/          : The ``fixtureguard`` command line.
- fixtures/     : Shared pytest fixtures, the test schema and importable data fixtures.

General guidance
- Keep unit fast and deterministic; prefer fakes over mocks at boundaries.
- Property-based tests live with the layer they exercise.
"""
