"""
Post-commit side effects.

Side effects of a write (search indexing, broadcasts, cache deletes) are
queued on the session and run once the outermost transaction commits.
Each callback is guarded on its own, so a failing side effect neither
affects the others nor reaches the committed write.

A callback belongs to the innermost SAVEPOINT open when it was queued.
Rolling that savepoint back drops it; releasing the savepoint hands it to
the enclosing transaction. Rolling back the outer transaction drops the
whole queue.

Usage:
    hooks = post_commit_hooks(session)
    hooks.add("index_product", search_index.index_product, dto)
    session.commit()  # index_product runs here
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy import event
from sqlalchemy.orm import Session, SessionTransaction

from stockapp.logging import get_logger

logger = get_logger("notifications.hooks")

SESSION_INFO_KEY = "post_commit_hooks"


@dataclass
class _Callback:
    name: str
    fn: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    # None means the outermost transaction
    savepoint: Optional[SessionTransaction] = None


def _enclosing_savepoint(transaction: SessionTransaction) -> Optional[SessionTransaction]:
    parent = transaction.parent
    return parent if parent is not None and parent.nested else None


def _inside(savepoint: Optional[SessionTransaction], transaction: SessionTransaction) -> bool:
    """True when ``savepoint`` is ``transaction`` or nested somewhere below it."""
    current = savepoint
    while current is not None:
        if current is transaction:
            return True
        current = current.parent
    return False


class PostCommitHooks:
    """Callbacks bound to one session's next outermost commit."""

    def __init__(self, session: Session):
        self.session = session
        self._pending: list[_Callback] = []
        event.listen(session, "after_commit", self._on_commit)
        event.listen(session, "after_soft_rollback", self._on_rollback)

    def add(self, name: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        savepoint = self.session.get_nested_transaction()
        self._pending.append(_Callback(name, fn, args, kwargs, savepoint))

    @property
    def pending(self) -> list[str]:
        return [callback.name for callback in self._pending]

    def _on_commit(self, session: Session) -> None:
        released = session.get_nested_transaction()
        if released is not None:
            # savepoint release: the outer transaction can still roll back
            enclosing = _enclosing_savepoint(released)
            for callback in self._pending:
                if callback.savepoint is released:
                    callback.savepoint = enclosing
            return
        self._run()

    def _run(self) -> None:
        callbacks, self._pending = self._pending, []
        for callback in callbacks:
            try:
                callback.fn(*callback.args, **callback.kwargs)
            except Exception as e:
                logger.error("post_commit_hook_failed", hook=callback.name, error=str(e))

    def _on_rollback(self, session: Session, previous_transaction: SessionTransaction) -> None:
        kept: list[_Callback] = []
        dropped: list[_Callback] = []
        for callback in self._pending:
            if previous_transaction.nested and not _inside(callback.savepoint, previous_transaction):
                kept.append(callback)
            else:
                dropped.append(callback)
        if dropped:
            logger.info("post_commit_hooks_discarded", hooks=[c.name for c in dropped])
        self._pending = kept


def post_commit_hooks(session: Session) -> PostCommitHooks:
    """Get the hook queue of a session, creating it on first use."""
    hooks = session.info.get(SESSION_INFO_KEY)
    if hooks is None:
        hooks = PostCommitHooks(session)
        session.info[SESSION_INFO_KEY] = hooks
    return hooks
