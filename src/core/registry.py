"""In-flight registry for pipeline runs, keyed by message identity."""

from __future__ import annotations

from enum import Enum

from core.models import MessageIdentity


class PipelineState(Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class InFlightRegistry:
    """Tracks which messages currently have a pipeline running.

    Only in-flight entries are retained. ``begin`` and ``finish`` are plain
    synchronous calls, so on a single event loop nothing can interleave
    between the check and the mark.
    """

    def __init__(self) -> None:
        self._entries: dict[MessageIdentity, PipelineState] = {}

    def state(self, identity: MessageIdentity) -> PipelineState:
        return self._entries.get(identity, PipelineState.NOT_STARTED)

    def begin(self, identity: MessageIdentity) -> bool:
        """Mark ``identity`` in progress; return False if it already is."""

        if self.state(identity) is PipelineState.IN_PROGRESS:
            return False
        self._entries[identity] = PipelineState.IN_PROGRESS
        return True

    def finish(self, identity: MessageIdentity) -> PipelineState:
        """Clear the entry so a later event may start a new run."""

        self._entries.pop(identity, None)
        return PipelineState.COMPLETED

    def __contains__(self, identity: object) -> bool:
        return identity in self._entries

    def __len__(self) -> int:
        return len(self._entries)
