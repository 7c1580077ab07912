"""Change-driven application of the normalizer to a live list container.

Responsibilities:
- Discover the list container, retrying at a fixed interval until it exists.
- Hold exactly one watch per container; rebinding releases the old watch first.
- Normalize every qualifying node once per mutation batch and mark it.
- Defer and debounce work requested by host UI transitions.

Key types:
- `WatchState`: the watch currently held for a container.
- `WatchRegistry`: per-selector owner of `WatchState` entries.
- `ChangeDrivenApplier`: the only caller of the normalizer on live nodes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence
from weakref import WeakKeyDictionary

from ..config import WatchConfig
from ..telemetry.logger import CleanerLogger
from ..text.markup import StripTags, looks_like_markup
from ..text.normalizer import DescriptionNormalizer
from .host import (
    HostDocument,
    ListContainer,
    MarkupNode,
    MutationRecord,
    WatchHandle,
    WatchOptions,
)
from .scheduler import Scheduler, TimerHandle


_PRE_WRAP = ("white-space", "pre-wrap")


class TextNormalizer(Protocol):
    """Anything that maps raw markup to canonical text."""

    def normalize(self, raw: str | None) -> str:
        """Return canonical text for `raw`."""


@dataclass(slots=True)
class WatchState:
    """Watch held for one container instance.

    Attributes:
        container: The container the watch is bound to.
        handle: Watch handle, exclusively owned by the registry entry.
        attached: Whether the handle is still connected.
    """

    container: ListContainer
    handle: WatchHandle
    attached: bool = True


class WatchRegistry:
    """Owns at most one `WatchState` per container selector."""

    def __init__(self) -> None:
        """Create an empty registry."""

        self._states: dict[str, WatchState] = {}

    def get(self, selector: str) -> WatchState | None:
        """Return the live state for `selector`."""

        return self._states.get(selector)

    def is_bound(self, selector: str, container: ListContainer) -> bool:
        """Return whether `container` already holds the watch for `selector`."""

        state = self._states.get(selector)
        return state is not None and state.attached and state.container is container

    def acquire(self, selector: str, container: ListContainer, handle: WatchHandle) -> WatchState:
        """Record a new watch, releasing any previous one for the selector first."""

        self.release(selector)
        state = WatchState(container=container, handle=handle)
        self._states[selector] = state
        return state

    def release(self, selector: str) -> bool:
        """Disconnect and forget the watch for `selector`; return whether one existed."""

        state = self._states.pop(selector, None)
        if state is None:
            return False
        if state.attached:
            state.handle.disconnect()
            state.attached = False
        return True

    def release_all(self) -> int:
        """Disconnect every watch and return how many were released."""

        selectors = list(self._states)
        for selector in selectors:
            self.release(selector)
        return len(selectors)

    def __len__(self) -> int:
        """Number of held watches."""

        return len(self._states)


class ChangeDrivenApplier:
    """Keep content-holder nodes of a live list normalized as they appear."""

    def __init__(
        self,
        document: HostDocument,
        scheduler: Scheduler,
        normalizer: TextNormalizer | None = None,
        config: WatchConfig | None = None,
        logger: CleanerLogger | None = None,
    ) -> None:
        """Initialize with injected host, timers, normalizer, and settings."""

        self.document = document
        self.scheduler = scheduler
        self.normalizer = normalizer or DescriptionNormalizer()
        self.config = config or WatchConfig()
        self.logger = logger or CleanerLogger()
        self.registry = WatchRegistry()
        self.normalized_count = 0
        self._bind_attempts = 0
        self._bind_timer: TimerHandle | None = None
        self._open_timer: TimerHandle | None = None
        self._rescan_timer: TimerHandle | None = None
        self._late_timer: TimerHandle | None = None
        self._writing = False
        self._reprocess_counts: WeakKeyDictionary[MarkupNode, int] = WeakKeyDictionary()

    # Host events

    def on_container_shown(self) -> None:
        """Host event: the list container became visible."""

        self._schedule_initialize()

    def on_navigation_completed(self) -> None:
        """Host event: a navigation action that may re-render the list finished."""

        self._schedule_initialize()

    def on_item_changed(self) -> None:
        """Host event: item content changed outside the watched scope."""

        self.request_rescan()

    # Binding

    def initialize(self) -> int:
        """Process pending nodes, then make sure the container is watched."""

        self._open_timer = None
        if self._bind_timer is None:
            self._bind_attempts = 0
        processed = self.process_pending()
        self.bind()
        return processed

    def bind(self) -> bool:
        """Bind a watch to the current container; retry later when it is missing.

        Returns:
            Whether a watch is held for the live container after the call.
        """

        selector = self.config.list_selector
        container = self.document.find(selector)
        if container is None:
            self._schedule_bind_retry()
            return False

        self._cancel(self._bind_timer)
        self._bind_timer = None
        self._bind_attempts = 0
        if self.registry.is_bound(selector, container):
            return True

        if self.registry.get(selector) is not None:
            self.registry.release(selector)
            self.logger.event("watch", "rebind", selector=selector)

        handle = container.observe(self._on_mutations, self.watch_options())
        self.registry.acquire(selector, container, handle)
        self.logger.event("watch", "bound", selector=selector)
        return True

    def watch_options(self) -> WatchOptions:
        """Options for the container watch; the marker attribute is never watched."""

        return WatchOptions(
            child_list=True,
            subtree=self.config.observe_subtree,
            character_data=self.config.observe_subtree,
            attribute_filter=(),
        )

    def release(self) -> None:
        """Disconnect every watch and cancel every pending timer."""

        for timer in (self._bind_timer, self._open_timer, self._rescan_timer, self._late_timer):
            self._cancel(timer)
        self._bind_timer = self._open_timer = self._rescan_timer = self._late_timer = None
        released = self.registry.release_all()
        self.logger.event("watch", "released", watches=released)

    # Processing

    def process_pending(self, container: ListContainer | None = None) -> int:
        """Normalize every qualifying node of the container.

        Returns:
            Number of nodes normalized in this pass.
        """

        target = container if container is not None else self._current_container()
        if target is None:
            return 0
        nodes = [node for node in target.query_items(self.config.item_selector) if self._qualifies(node)]
        for node in nodes:
            if node.has_marker(self.config.processed_marker):
                self._reprocess_counts[node] = self._reprocess_counts.get(node, 0) + 1
            self._apply(node)
        if nodes:
            self.logger.event("watch", "batch", normalized=len(nodes))
        return len(nodes)

    def rescan_visible(self, container: ListContainer | None = None) -> int:
        """Re-normalize visible nodes regardless of marker; write only on change.

        Returns:
            Number of nodes whose text was rewritten.
        """

        target = container if container is not None else self._current_container()
        if target is None:
            return 0
        rewritten = 0
        for node in target.query_items(self.config.item_selector):
            if not (node.is_attached and node.is_visible):
                continue
            if self._apply(node):
                rewritten += 1
        self.logger.event("watch", "late_rescan", level="DEBUG", rewritten=rewritten)
        return rewritten

    def request_rescan(self) -> None:
        """Debounced `process_pending` request."""

        self._cancel(self._rescan_timer)
        self._rescan_timer = self.scheduler.call_later(
            self.config.debounce_seconds, self._run_requested_rescan
        )

    # Internals

    def _on_mutations(self, records: Sequence[MutationRecord]) -> None:
        """Watch callback: process the whole batch before returning."""

        if self._writing:
            return
        selector = self.config.list_selector
        state = self.registry.get(selector)
        if state is None or not state.container.is_attached:
            self.registry.release(selector)
            self.logger.event("watch", "container_lost", level="WARNING", selector=selector)
            if self.bind():
                self.process_pending()
            return
        self.process_pending(state.container)
        self._schedule_late_rescan()

    def _qualifies(self, node: MarkupNode) -> bool:
        """Return whether `node` should be normalized now."""

        if not node.is_attached:
            return False
        if not node.has_marker(self.config.processed_marker):
            return True
        if not self.config.aggressive or not looks_like_markup(node.raw_content):
            return False
        attempts = self._reprocess_counts.get(node, 0)
        if attempts >= self.config.max_reprocess_attempts:
            self.logger.event("watch", "reprocess_limit", level="DEBUG", attempts=attempts)
            return False
        return True

    def _apply(self, node: MarkupNode) -> bool:
        """Write canonical text, display hint, and marker; return whether content changed.

        Content is rewritten when its text differs or when it still holds
        element markup, so re-rendered formatting is flattened too.
        """

        text = self.normalizer.normalize(node.raw_content)
        self._writing = True
        try:
            changed = node.text != text or StripTags.TAG_RE.search(node.raw_content) is not None
            if changed:
                node.set_text(text)
            node.set_style(*_PRE_WRAP)
            node.add_marker(self.config.processed_marker)
        finally:
            self._writing = False
        self.normalized_count += 1
        return changed

    def _current_container(self) -> ListContainer | None:
        """Return the bound container, or look it up when nothing is bound."""

        state = self.registry.get(self.config.list_selector)
        if state is not None and state.container.is_attached:
            return state.container
        return self.document.find(self.config.list_selector)

    def _schedule_initialize(self) -> None:
        """Defer initialization so the host can finish rendering; coalesce bursts."""

        self._cancel(self._open_timer)
        self._open_timer = self.scheduler.call_later(
            self.config.open_defer_seconds, self.initialize
        )

    def _schedule_bind_retry(self) -> None:
        """Retry discovery at a fixed interval, up to the optional attempt cap."""

        if self._bind_timer is not None:
            return
        self._bind_attempts += 1
        limit = self.config.max_bind_attempts
        if limit is not None and self._bind_attempts > limit:
            self.logger.event(
                "watch", "bind_gave_up", level="WARNING", attempts=self._bind_attempts - 1
            )
            return
        self.logger.event("watch", "bind_retry", level="DEBUG", attempt=self._bind_attempts)
        self._bind_timer = self.scheduler.call_later(
            self.config.bind_retry_seconds, self._retry_bind
        )

    def _retry_bind(self) -> None:
        """Timer callback for discovery retry."""

        self._bind_timer = None
        if self.bind():
            self.process_pending()

    def _schedule_late_rescan(self) -> None:
        """Queue one follow-up visible-node scan for late asynchronous renders."""

        if self.config.late_rescan_seconds <= 0.0:
            return
        self._cancel(self._late_timer)
        self._late_timer = self.scheduler.call_later(
            self.config.late_rescan_seconds, self._run_late_rescan
        )

    def _run_late_rescan(self) -> None:
        """Timer callback for the late rescan."""

        self._late_timer = None
        self.rescan_visible()

    def _run_requested_rescan(self) -> None:
        """Timer callback for debounced rescans."""

        self._rescan_timer = None
        self.process_pending()

    @staticmethod
    def _cancel(timer: TimerHandle | None) -> None:
        """Cancel a timer if one is pending."""

        if timer is not None:
            timer.cancel()
