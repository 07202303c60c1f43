"""Project state store.

Holds the single authoritative :class:`ProjectState` snapshot. Every
mutation builds a new snapshot, swaps it in, and then notifies the
subscribers in mutation order, so a reader always sees a consistent state.
"""

import logging
import uuid
from typing import Any, Callable, List, Optional

from .errors import InvalidStateError
from .models import AgentLogEntry, AgentTag, Frame, ProjectState

logger = logging.getLogger(__name__)

Subscriber = Callable[[ProjectState], None]


class ProjectStore:
    """Single-writer store for the current project snapshot."""

    def __init__(self, initial: Optional[ProjectState] = None) -> None:
        self._state = initial or ProjectState()
        self._subscribers: List[Subscriber] = []

    @property
    def state(self) -> ProjectState:
        """Return the current snapshot."""
        return self._state

    @property
    def current_frame(self) -> Optional[Frame]:
        """Return the selected frame of the current snapshot."""
        return self._state.current_frame

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback invoked with every new snapshot.

        Returns:
            A function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def replace(self, state: ProjectState) -> ProjectState:
        """Swap in a whole new snapshot and notify subscribers.

        A failing subscriber is logged and skipped; the remaining ones
        still receive the snapshot.
        """
        self._state = state
        for callback in list(self._subscribers):
            try:
                callback(state)
            except Exception:
                logger.exception(f"Subscriber {callback!r} failed")
        return state

    def update(self, **fields: Any) -> ProjectState:
        """Replace the snapshot with a copy that has ``fields`` changed.

        The copy is validated before it is published, so an invalid update
        leaves the current snapshot untouched.
        """
        data = dict(self._state)
        data.update(fields)
        return self.replace(ProjectState(**data))

    def append_log(self, agent: AgentTag, message: str) -> AgentLogEntry:
        """Append an entry to the activity log."""
        entry = AgentLogEntry(id=uuid.uuid4().hex, agent=agent, message=message)
        logger.debug(f"[{entry.agent.value}] {message}")
        self.update(logs=[*self._state.logs, entry])
        return entry

    def update_frame(self, index: int, select: bool = False, **fields: Any) -> Frame:
        """Merge ``fields`` into the frame at ``index``.

        Only that one frame is rebuilt; every other frame object is carried
        over unchanged. With ``select`` the frame also becomes the selected
        one in the same snapshot.

        Raises:
            InvalidStateError: If there are no frames yet.
            IndexError: If ``index`` is out of range.
        """
        frames = self._state.frames
        if not frames:
            raise InvalidStateError("No frames to update")
        if not 0 <= index < len(frames):
            raise IndexError(f"Frame index {index} out of range (0-{len(frames) - 1})")

        data = dict(frames[index])
        data.update(fields)
        frame = Frame(**data)

        new_frames = list(frames)
        new_frames[index] = frame
        if select:
            self.update(frames=new_frames, current_frame_index=index)
        else:
            self.update(frames=new_frames)
        return frame

    def select_frame(self, index: int) -> None:
        """Set the selected frame.

        Raises:
            InvalidStateError: If there are no frames yet.
            IndexError: If ``index`` is out of range.
        """
        frames = self._state.frames
        if not frames:
            raise InvalidStateError("No frames to select")
        if not 0 <= index < len(frames):
            raise IndexError(f"Frame index {index} out of range (0-{len(frames) - 1})")
        self.update(current_frame_index=index)
