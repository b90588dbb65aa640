"""TaskTumbler Test Suite

Test organization:
- unit/: Unit tests for individual modules
  - duel/: Duel engine tests (matchmaking, rating, combo, particles, engine)
  - tasks/: Task store tests
- integration/: Engine wired to the SQLite task store
"""
