from contextlib import contextmanager
from contextvars import ContextVar

_building = ContextVar("linked_orm_building", default=False)


def is_building():
    """True while inside a ``building()`` block in the current task."""
    return _building.get()


@contextmanager
def building():
    """Mark an in-progress build so relation binds skip their saves.

    Example:
        with building():
            await author.posts.substitute(drafts)
    """
    token = _building.set(True)
    try:
        yield
    finally:
        _building.reset(token)
