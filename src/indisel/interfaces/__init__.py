"""Interfaces (application boundary) for INDISEL.

Defines framework-free application contracts (ABCs) implemented by adapters,
such as the repository persisting selections. Business rules stay out of this
package.

Dependency rule: may import `indisel.domain` value types only. It may be
imported by `indisel.service_layer` and `indisel.adapters`.
"""
