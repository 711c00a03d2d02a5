"""Domain layer for INDISEL.

Contains the business rules: indicator value objects, the catalog index, the
selection state, relationship resolution and validation rules. This package is
deliberately technology-agnostic and performs no I/O.

Dependency rule: do not import from `indisel.adapters` or `indisel.service_layer`.
"""
