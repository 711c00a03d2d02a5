"""Interface for the repository persisting project selections."""

import abc
from typing import Literal, TypeAlias

from indisel.domain.selection import SelectionState

SelectionKind: TypeAlias = Literal["selection", "mer", "unique_indicators"]
SELECTION_KINDS: tuple[SelectionKind, ...] = ("selection", "mer", "unique_indicators")


class SelectionRepository(abc.ABC):
    """Interface for reading and writing the selections of a project.

    A project has one selection state per kind: the project-wide selection,
    the MER (reporting) selection and the unique-beneficiary selection.
    """

    @abc.abstractmethod
    def get(self, project_id: str, kind: SelectionKind) -> SelectionState | None:
        """Get the stored selection of a project.

        Args:
            project_id: The project identifier.
            kind: Which of the project's selections to read.

        Returns:
            The stored selection state if found, otherwise None.

        Raises:
            UnknownSelectionKindError: If `kind` is not in `SELECTION_KINDS`.
        """

    @abc.abstractmethod
    def add(self, project_id: str, kind: SelectionKind, state: SelectionState) -> None:
        """Store (or replace) the selection of a project.

        Args:
            project_id: The project identifier.
            kind: Which of the project's selections to write.
            state: The selection state to store.

        Raises:
            UnknownSelectionKindError: If `kind` is not in `SELECTION_KINDS`.
        """
