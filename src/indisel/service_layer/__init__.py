"""Service layer for INDISEL.

Implements application use-cases on top of the domain: the layered selections
of a project and their persistence through the repository port.

Dependency rule: may import `indisel.domain` and `indisel.interfaces`, but not
`indisel.adapters`.
"""
