"""Domain-layer error definitions."""

# ============================================================================
#                           General domain errors
# ============================================================================


class DomainError(Exception):
    """Base class for domain-layer errors."""


class UnknownSectorError(DomainError):
    """Raised when a sector id is not part of the configured sectors."""

    def __init__(self, sector_id: str) -> None:
        super().__init__(f"Sector '{sector_id}' is not a configured sector.")
        self.sector_id = sector_id


class UnknownSelectionKindError(DomainError):
    """Raised when a project selection kind is not one of the stored kinds."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"Selection kind '{kind}' is not a known selection kind.")
        self.kind = kind


# ============================================================================
#                           Catalog related errors
# ============================================================================


class CatalogError(DomainError):
    """Base class for all catalog-related errors."""


class InvalidIndicatorError(CatalogError):
    """Raised when an indicator record violates the catalog invariants."""

    def __init__(self, code: str, reason: str) -> None:
        super().__init__(f"Invalid indicator ({code}): {reason}")
        self.code = code
        self.reason = reason


class CatalogIntegrityError(CatalogError):
    """Raised when two indicators share the same relation key.

    Relationships cannot be resolved unambiguously with such a catalog, so the
    build is aborted.

    Attributes:
        key (tuple[str, str, str]): The (sector_id, hierarchy_level, series) key.
        first_code (str): Code of the indicator already holding the key.
        second_code (str): Code of the indicator that collided with it.
    """

    def __init__(
        self, key: tuple[str, str, str], first_code: str, second_code: str
    ) -> None:
        sector_id, level, series = key
        super().__init__(
            f"Indicators {first_code} and {second_code} share the relation key "
            f"(sector={sector_id}, level={level}, series={series})."
        )
        self.key = key
        self.first_code = first_code
        self.second_code = second_code


class RelationNotFoundError(CatalogError):
    """Raised when a series has no global indicator in a sector.

    Attributes:
        sector_id (str): The sector searched.
        series (str): The series whose global indicator is missing.
    """

    def __init__(self, sector_id: str, series: str) -> None:
        super().__init__(
            f"No global indicator for series {series} in sector {sector_id}."
        )
        self.sector_id = sector_id
        self.series = series
