"""In-memory live tree implementing the host protocols.

This mirrors how a browser tree behaves for the parts the applier relies on:
setting text escapes it into the inner markup, marker classes can be
observed as attribute changes, and mutation batches are delivered to every
active watch whose options cover the change. Hosts embedding the applier
outside a browser, and the test suite, use it directly.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
import html
from typing import Iterator, Sequence

from ..text.markup import StripTags
from .host import (
    MUTATION_ATTRIBUTES,
    MUTATION_CHARACTER_DATA,
    MUTATION_CHILD_LIST,
    MutationCallback,
    MutationRecord,
    WatchOptions,
)


@dataclass(eq=False)
class InMemoryNode:
    """A content-holder element with inner markup, classes, and inline styles."""

    raw_content: str = ""
    classes: set[str] = field(default_factory=lambda: {"ch_description"})
    styles: dict[str, str] = field(default_factory=dict)
    is_visible: bool = True
    write_count: int = 0
    _container: InMemoryContainer | None = field(default=None, repr=False)

    @property
    def is_attached(self) -> bool:
        """Whether the node sits in an attached container."""

        return self._container is not None and self._container.is_attached

    @property
    def text(self) -> str:
        """Text content: inner markup with tags removed and entities decoded."""

        return html.unescape(StripTags.TAG_RE.sub("", self.raw_content))

    def set_text(self, text: str) -> None:
        """Replace content with text; the inner markup becomes its escaped form."""

        self.raw_content = html.escape(text, quote=False)
        self.write_count += 1
        self._notify(MutationRecord(kind=MUTATION_CHILD_LIST, target=self))

    def set_markup(self, markup: str) -> None:
        """Replace inner markup, as a host re-render would."""

        self.raw_content = markup
        self._notify(MutationRecord(kind=MUTATION_CHARACTER_DATA, target=self))

    def has_marker(self, marker: str) -> bool:
        """Return whether `marker` is among the node classes."""

        return marker in self.classes

    def add_marker(self, marker: str) -> None:
        """Add a class and report it as a `class` attribute change."""

        if marker in self.classes:
            return
        self.classes.add(marker)
        self._notify(MutationRecord(kind=MUTATION_ATTRIBUTES, target=self, attribute_name="class"))

    def remove_marker(self, marker: str) -> None:
        """Drop a class, as a host re-render would."""

        if marker not in self.classes:
            return
        self.classes.discard(marker)
        self._notify(MutationRecord(kind=MUTATION_ATTRIBUTES, target=self, attribute_name="class"))

    def set_style(self, name: str, value: str) -> None:
        """Set an inline style property and report a `style` attribute change."""

        if self.styles.get(name) == value:
            return
        self.styles[name] = value
        self._notify(MutationRecord(kind=MUTATION_ATTRIBUTES, target=self, attribute_name="style"))

    def _notify(self, record: MutationRecord) -> None:
        """Forward a descendant change to the owning container."""

        if self._container is not None:
            self._container.record(record)


class InMemoryWatch:
    """Active watch on an `InMemoryContainer`."""

    def __init__(
        self,
        container: InMemoryContainer,
        callback: MutationCallback,
        options: WatchOptions,
    ) -> None:
        """Register the watch with its container."""

        self._container = container
        self.callback = callback
        self.options = options
        self.connected = True

    def disconnect(self) -> None:
        """Stop delivery; disconnecting twice is harmless."""

        if self.connected:
            self.connected = False
            self._container.watches.remove(self)

    def accepts(self, record: MutationRecord) -> bool:
        """Return whether this watch's options cover `record`."""

        is_descendant = record.target is not self._container
        if is_descendant and not self.options.subtree:
            return False
        if record.kind == MUTATION_CHILD_LIST:
            return self.options.child_list
        if record.kind == MUTATION_CHARACTER_DATA:
            return self.options.character_data
        return record.attribute_name in self.options.attribute_filter


class InMemoryContainer:
    """List container holding nodes and delivering batched mutations."""

    def __init__(self) -> None:
        """Create an attached, empty container."""

        self.children: list[InMemoryNode] = []
        self.watches: list[InMemoryWatch] = []
        self.is_attached = True
        self._pending: list[MutationRecord] | None = None

    def query_items(self, selector: str) -> Sequence[InMemoryNode]:
        """Return children whose class matches a `.class` selector."""

        class_name = selector.lstrip(".")
        return [child for child in self.children if class_name in child.classes]

    def observe(self, callback: MutationCallback, options: WatchOptions) -> InMemoryWatch:
        """Start a watch."""

        watch = InMemoryWatch(self, callback, options)
        self.watches.append(watch)
        return watch

    def append(self, *nodes: InMemoryNode) -> None:
        """Insert nodes at the end; one `child_list` record per node."""

        for node in nodes:
            node._container = self
            self.children.append(node)
            self.record(MutationRecord(kind=MUTATION_CHILD_LIST, target=self))

    def remove(self, node: InMemoryNode) -> None:
        """Detach a node."""

        self.children.remove(node)
        node._container = None
        self.record(MutationRecord(kind=MUTATION_CHILD_LIST, target=self))

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Collect records and deliver them as one batch on exit."""

        if self._pending is not None:
            yield
            return
        self._pending = []
        try:
            yield
        finally:
            records, self._pending = self._pending, None
            self._deliver(records)

    def record(self, record: MutationRecord) -> None:
        """Queue a record inside `batch()`, otherwise deliver it immediately."""

        if self._pending is not None:
            self._pending.append(record)
            return
        self._deliver([record])

    def _deliver(self, records: list[MutationRecord]) -> None:
        """Deliver records to each watch that accepts at least one of them."""

        for watch in list(self.watches):
            accepted = [record for record in records if watch.accepts(record)]
            if accepted and watch.connected:
                watch.callback(accepted)


class InMemoryDocument:
    """Document mapping container selectors to containers."""

    def __init__(self) -> None:
        """Create an empty document."""

        self.containers: dict[str, InMemoryContainer] = {}
        self.find_calls = 0

    def find(self, selector: str) -> InMemoryContainer | None:
        """Return the attached container for `selector`."""

        self.find_calls += 1
        container = self.containers.get(selector)
        if container is None or not container.is_attached:
            return None
        return container

    def mount(self, selector: str, container: InMemoryContainer) -> InMemoryContainer:
        """Attach `container` under `selector`, detaching any previous instance."""

        previous = self.containers.get(selector)
        if previous is not None and previous is not container:
            previous.is_attached = False
        container.is_attached = True
        self.containers[selector] = container
        return container

    def unmount(self, selector: str) -> None:
        """Detach and forget the container under `selector`."""

        container = self.containers.pop(selector, None)
        if container is not None:
            container.is_attached = False
