from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from .errors import NoHistory
from .state import Session


def record(session: Session) -> None:
    """Pushes a snapshot of the current state for undo and invalidates the redo future."""
    session.undo_stack.append(session.state.clone())
    session.redo_stack.clear()


@contextmanager
def recorded(session: Session) -> Iterator[Session]:
    """Records the undo snapshot for one mutation. If the block raises, the state
    and both stacks are put back as they were before it."""
    redo_stack = list(session.redo_stack)
    record(session)
    try:
        yield session
    except Exception:
        session.state.restore_from(session.undo_stack.pop())
        session.redo_stack[:] = redo_stack
        raise


def undo(session: Session) -> None:
    if not session.undo_stack:
        raise NoHistory("Can't undo, because there are no past states.")
    session.redo_stack.append(session.state)
    session.state = session.undo_stack.pop()
    session.emit('on_undo', session.state)


def redo(session: Session) -> None:
    if not session.redo_stack:
        raise NoHistory("Can't redo, because there are no future states.")
    session.undo_stack.append(session.state)
    session.state = session.redo_stack.pop()
    session.emit('on_redo', session.state)


@contextmanager
def checkpoint(session: Session) -> Iterator[Session]:
    """Scoped speculation: any moves made inside the block are rolled back on exit,
    whether the block finishes or raises.

    Every move pushes its pre-move snapshot, so the first snapshot pushed inside the
    block is the state as it was on entry. The GameState object itself is kept;
    its players and tiles are swapped for the snapshot's.
    """
    entry = session.state
    depth = len(session.undo_stack)
    redo_stack = list(session.redo_stack)
    try:
        yield session
    finally:
        if len(session.undo_stack) > depth:
            entry.restore_from(session.undo_stack[depth])
            del session.undo_stack[depth:]
        session.state = entry
        session.redo_stack[:] = redo_stack
