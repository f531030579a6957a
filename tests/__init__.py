"""tablecheck test suite.

- unit/: one module per library module, plus the CLI
"""
