"""Global pytest fixtures for INDISEL."""

pytest_plugins = [
    "tests.fixtures.catalog",
]
