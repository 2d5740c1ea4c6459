"""Test package for imapquery.

What:
  Marks ``tests`` as a package so the root ``conftest.py`` is imported under a
  stable module name.

Invariants & Safety:
  - Importing ``tests`` must stay side-effect free; path setup and fixtures
    live in ``conftest.py``.
"""
