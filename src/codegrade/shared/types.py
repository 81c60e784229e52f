"""Domain-specific types that prevent primitive obsession."""

from __future__ import annotations

from enum import StrEnum

# =============================================================================
# NEWTYPES
# =============================================================================


class FilePath(str):
    """A path to a source file on disk."""


class TokenCount(int):
    """A count of LLM tokens."""

    def __add__(self, other: object) -> TokenCount:
        if isinstance(other, int):
            return TokenCount(int.__add__(self, other))
        return NotImplemented

    def __sub__(self, other: object) -> TokenCount:
        if isinstance(other, int):
            return TokenCount(int.__sub__(self, other))
        return NotImplemented


# =============================================================================
# ENUMS
# =============================================================================


class GradeCategory(StrEnum):
    """The four graded quality categories, keyed by their report field name."""

    ARCHITECTURE = "architecture"
    CODE_QUALITY = "code_quality"
    VALIDATIONS = "validations"
    ERROR_HANDLING = "error_handling"

    @property
    def weight(self) -> int:
        """Fixed weight of the category, as a percentage."""
        return CATEGORY_WEIGHTS[self]


CATEGORY_WEIGHTS: dict[GradeCategory, int] = {
    GradeCategory.ARCHITECTURE: 25,
    GradeCategory.CODE_QUALITY: 30,
    GradeCategory.VALIDATIONS: 25,
    GradeCategory.ERROR_HANDLING: 20,
}


class Severity(StrEnum):
    """Severity of a recurring problem."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class LetterGrade(StrEnum):
    """Final letter grade derived from the weighted score."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"
