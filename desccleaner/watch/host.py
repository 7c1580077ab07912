"""Host boundary consumed by the change-driven applier.

Responsibilities:
- Describe the live-tree objects the applier reads and writes as protocols.
- Define the mutation and watch-option records exchanged with the host.

The applier never queries a global document; a `HostDocument` is injected
and asked for the list container on every discovery attempt.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Protocol, Sequence


MUTATION_CHILD_LIST = "child_list"
MUTATION_CHARACTER_DATA = "character_data"
MUTATION_ATTRIBUTES = "attributes"


@dataclass(frozen=True, slots=True)
class MutationRecord:
    """One change notification delivered by a watched container.

    Attributes:
        kind: One of `child_list`, `character_data`, or `attributes`.
        target: The node or container the change happened on.
        attribute_name: Changed attribute for `attributes` records.
    """

    kind: str
    target: object
    attribute_name: str | None = None


@dataclass(frozen=True, slots=True)
class WatchOptions:
    """What a container watch reports.

    Attributes:
        child_list: Report direct child insertion/removal.
        subtree: Extend reports to descendants of direct children.
        character_data: Report text content changes (needs `subtree` for items).
        attribute_filter: Attribute names whose changes are reported.
    """

    child_list: bool = True
    subtree: bool = False
    character_data: bool = False
    attribute_filter: tuple[str, ...] = field(default_factory=tuple)


MutationCallback = Callable[[Sequence[MutationRecord]], None]


class WatchHandle(Protocol):
    """Handle returned by `ListContainer.observe`; exclusively owned by its binder."""

    def disconnect(self) -> None:
        """Stop delivering mutation batches."""


class MarkupNode(Protocol):
    """A content-holder element whose description gets normalized."""

    @property
    def raw_content(self) -> str:
        """Markup currently held by the node (inner HTML)."""

    @property
    def text(self) -> str:
        """Plain text currently displayed by the node."""

    @property
    def is_attached(self) -> bool:
        """Whether the node is part of the live tree."""

    @property
    def is_visible(self) -> bool:
        """Whether the node is currently rendered."""

    def set_text(self, text: str) -> None:
        """Replace the node content with plain text."""

    def has_marker(self, marker: str) -> bool:
        """Return whether the processed marker class is present."""

    def add_marker(self, marker: str) -> None:
        """Add the processed marker class."""

    def set_style(self, name: str, value: str) -> None:
        """Set an inline display hint such as `white-space: pre-wrap`."""


class ListContainer(Protocol):
    """The named list container holding content-holder nodes."""

    @property
    def is_attached(self) -> bool:
        """Whether the container is part of the live tree."""

    def query_items(self, selector: str) -> Sequence[MarkupNode]:
        """Return content-holder nodes matching `selector`, in document order."""

    def observe(self, callback: MutationCallback, options: WatchOptions) -> WatchHandle:
        """Start delivering mutation batches to `callback`."""


class HostDocument(Protocol):
    """Entry point to the live tree."""

    def find(self, selector: str) -> ListContainer | None:
        """Return the container matching `selector`, or `None` when not rendered yet."""
