"""INDISEL test suite.

Folder taxonomy
- unit/         : Isolated, fast checks of a single module/class/function.
- fixtures/     : Shared sample catalog and factory fixtures (no tests here).

General guidance
- Keep unit tests fast and deterministic; the engine is pure, so build what you need.
- Prefer the sample catalog in `tests/fixtures/catalog.py` over ad-hoc indicators,
  and document any new sample indicator in its module docstring.
- Property-based tests live with the layer they exercise and use @pytest.mark.property.
"""
