from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ._descriptors import type_name
from ._errors import CircularDependencyError


if TYPE_CHECKING:
    from types import TracebackType


class CycleGuard:
    """Tracks the tokens being resolved on the current call chain.

    Entries are released when the `GuardToken` returned by `enter` is released,
    normally by leaving its `with` block, so a failed resolution never leaves
    stale markers behind.
    """

    def __init__(self) -> None:
        self._in_progress: set[Any] = set()

    def enter(self, token: Any) -> GuardToken:
        if token in self._in_progress:
            raise CircularDependencyError(type_name(token))

        self._in_progress.add(token)
        return GuardToken(self, token)

    def in_progress(self, token: Any) -> bool:
        return token in self._in_progress

    def _release(self, token: Any) -> None:
        self._in_progress.discard(token)


class GuardToken:
    def __init__(self, guard: CycleGuard, token: Any) -> None:
        self._guard = guard
        self._token = token
        self._released = False

    def release(self) -> None:
        if not self._released:
            self._released = True
            self._guard._release(self._token)  # noqa: SLF001

    def __enter__(self) -> GuardToken:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
