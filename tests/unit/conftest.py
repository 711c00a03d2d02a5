"""Default marks for tests under `tests/unit/`."""

from pathlib import Path

import pytest

# pylint: disable=unused-argument

UNIT_ROOT = Path(__file__).parent.resolve()
MARKER_NAME = "unit"


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Mark every unit test with `unit`, property tests included.

    `pytest -m "unit and not property"` then runs the quick example-based
    tests only.
    """
    for item in items:
        if UNIT_ROOT not in item.path.resolve().parents:
            continue
        if item.get_closest_marker(MARKER_NAME) is None:
            item.add_marker(pytest.mark.unit)
