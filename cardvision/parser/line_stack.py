"""Working buffer of OCR lines consumed front-first by the segmenter."""

from collections import deque
from collections.abc import Iterable


class LineStack:
    """Order-preserving token buffer with O(1) front removal and insertion.

    Every token popped since the last ``begin_block`` is remembered so a
    failed block can be reported with the text it swallowed.
    """

    def __init__(self, lines: Iterable[str] = ()):
        self._tokens: deque[str] = deque(lines)
        self._block: list[str] = []

    def pop_front(self) -> str | None:
        """Remove and return the next token, or None if the stack is empty."""
        if not self._tokens:
            return None
        token = self._tokens.popleft()
        self._block.append(token)
        return token

    def push_front(self, token: str) -> None:
        """Put a token back so it is the next one popped."""
        self._tokens.appendleft(token)

    def begin_block(self) -> None:
        """Start recording the tokens consumed by a new transaction block."""
        self._block = []

    @property
    def block_lines(self) -> list[str]:
        """Tokens popped since the last ``begin_block``."""
        return list(self._block)

    def __len__(self) -> int:
        return len(self._tokens)

    def __bool__(self) -> bool:
        return bool(self._tokens)

    def __repr__(self) -> str:
        return f"LineStack({list(self._tokens)!r})"
