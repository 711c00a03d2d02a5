"""In-memory SelectionRepository implementation for testing purposes."""

from indisel.domain.errors import UnknownSelectionKindError
from indisel.domain.selection import SelectionState
from indisel.interfaces.selection_repository import (
    SELECTION_KINDS,
    SelectionKind,
    SelectionRepository,
)


class InMemorySelectionRepository(SelectionRepository):
    """In-memory implementation of the SelectionRepository interface.

    States are stored in their plain ``{sector_id: [ids]}`` form, the same
    shape a persistent store would hold. This implementation is intended for
    testing and development purposes only.
    """

    def __init__(self) -> None:
        self._data: dict[tuple[str, str], dict[str, list[str]]] = {}

    def get(self, project_id: str, kind: SelectionKind) -> SelectionState | None:
        stored = self._data.get(self._key(project_id, kind))
        if stored is None:
            return None
        return SelectionState.from_mapping(stored)

    def add(self, project_id: str, kind: SelectionKind, state: SelectionState) -> None:
        self._data[self._key(project_id, kind)] = state.to_dict()

    @staticmethod
    def _key(project_id: str, kind: str) -> tuple[str, str]:
        if kind not in SELECTION_KINDS:
            raise UnknownSelectionKindError(kind)
        return project_id, kind
