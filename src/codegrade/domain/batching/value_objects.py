"""Value objects for the Batching bounded context."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from codegrade.shared.constants import (
    DEFAULT_MAX_INPUT_TOKENS,
    DEFAULT_MAX_ITEMS_PER_BATCH,
)
from codegrade.shared.types import FilePath, TokenCount

# =============================================================================
# VALUE OBJECTS
# =============================================================================


@dataclass(frozen=True)
class SourceItem:
    """One source file's text, already capped to the maximum length."""

    path: FilePath
    name: str
    content: str


@dataclass(frozen=True)
class Batch:
    """An ordered group of source items submitted in one remote call.

    ``number`` is 1-based and follows plan order.
    """

    number: int
    items: tuple[SourceItem, ...]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[SourceItem]:
        return iter(self.items)

    @property
    def item_names(self) -> list[str]:
        return [item.name for item in self.items]


@dataclass(frozen=True)
class BatchingConfig:
    """Limits applied when grouping items into batches."""

    max_items_per_batch: int = DEFAULT_MAX_ITEMS_PER_BATCH
    max_token_budget: TokenCount = TokenCount(DEFAULT_MAX_INPUT_TOKENS)

    def __post_init__(self) -> None:
        if self.max_items_per_batch < 1:
            msg = (
                "max_items_per_batch must be at least 1, "
                f"got {self.max_items_per_batch}"
            )
            raise ValueError(msg)
        if self.max_token_budget < 1:
            msg = f"max_token_budget must be at least 1, got {self.max_token_budget}"
            raise ValueError(msg)
