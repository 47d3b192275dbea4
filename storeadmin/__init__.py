"""Storefront admin catalog core.

Validation, hierarchy resolution and mutation coordination for the
catalog screens of the store admin console.
"""

__version__ = "0.1.0"
