"""Adapters for INDISEL.

Concrete implementations of the interfaces defined in `indisel.interfaces`.
"""
