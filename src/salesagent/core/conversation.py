"""In-memory, append-only conversation transcript."""

from typing import (
    List,
    Tuple,
)

from salesagent.core.schema import Turn


class ConversationStore:
    """
    Ordered sequence of turns; insertion order is chronological order.

    The turn orchestrator is the only writer.  Turns are immutable and never reordered or removed,
    so readers can hold on to a snapshot safely.
    """

    def __init__(self) -> None:
        self._turns: List[Turn] = []

    def append(self, turn: Turn) -> None:
        if not isinstance(turn, Turn):
            raise TypeError(f"expected Turn, got {type(turn).__name__}")
        self._turns.append(turn)

    def snapshot(self) -> Tuple[Turn, ...]:
        """Read-only view of the transcript as of now."""
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)
