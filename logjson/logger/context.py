"""Ambient context attached to every record formatted in the current scope.

Properties live in a ``contextvars.ContextVar`` so each thread and each asyncio
task sees its own mapping. Setting a property copies the mapping and pushing
onto a stack stores a new stack, which keeps snapshots taken earlier and
copies held by other tasks unchanged.

Example:
    LogContext.set("request_id", "abc-123")
    with LogContext.stack("operation").push("checkout"):
        logger.info("charging card")
"""

import contextvars
from collections.abc import Iterator, Mapping
from typing import Any

_properties_var: contextvars.ContextVar[dict | None] = contextvars.ContextVar(
    "logjson_properties", default=None
)


class _StackFrame:
    def __init__(self, stack: "ContextStack", depth: int):
        self._stack = stack
        self._depth = depth

    def __enter__(self):
        return self._stack

    def __exit__(self, exc_type, exc, tb):
        self._stack.trim(self._depth)
        return False


class ContextStack:
    """Ordered push/pop context value, most recent entry on top."""

    def __init__(self, items: list[str] | None = None):
        self._items: list[str] = list(items or [])

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"ContextStack({self._items!r})"

    @property
    def count(self) -> int:
        return len(self._items)

    def push(self, value: Any) -> _StackFrame:
        """Push ``value`` and return a context manager that pops it on exit."""
        depth = len(self._items)
        self._items.append(str(value))
        return _StackFrame(self, depth)

    def pop(self) -> str | None:
        if not self._items:
            return None
        return self._items.pop()

    def peek(self) -> str | None:
        return self._items[-1] if self._items else None

    def clear(self) -> None:
        self._items.clear()

    def trim(self, depth: int) -> None:
        del self._items[depth:]

    def snapshot(self) -> list[str]:
        """Entries oldest first, without touching the stack."""
        return list(self._items)


def stack_values(stack: ContextStack) -> list[str] | None:
    """Read a stack in push order and leave it as it was found.

    Entries are popped newest first, then reversed into chronological order
    and pushed back. Returns None for an empty stack.
    """
    if stack is None or len(stack) == 0:
        return None

    popped = []
    try:
        while len(stack) > 0:
            popped.append(stack.pop())
    finally:
        values = list(reversed(popped))
        for value in values:
            stack.push(value)
    return values


def flatten_context(*sources: Mapping | None) -> dict:
    """Merge context mappings into flat document fields.

    Later sources overwrite earlier ones. Stacks become arrays of strings in
    push order; empty stacks are left out entirely.
    """
    flat = {}
    for source in sources:
        if not source:
            continue
        for key, value in source.items():
            if isinstance(value, ContextStack):
                values = stack_values(value)
                if values is None:
                    flat.pop(key, None)
                    continue
                flat[key] = values
            else:
                flat[key] = value
    return flat


class _Restore:
    def __init__(self, key: str, previous: ContextStack):
        self._key = key
        self._previous = previous

    def __enter__(self):
        return LogContext.stack(self._key)

    def __exit__(self, exc_type, exc, tb):
        LogContext.set(self._key, self._previous)
        return False


class ScopedContextStack:
    """Stack stored under a ``LogContext`` key.

    Every change stores a new ``ContextStack`` in the current context instead
    of mutating the stored one, so tasks and threads that copied the context
    earlier keep seeing their own entries.
    """

    def __init__(self, key: str):
        self.key = key

    def _stored(self) -> ContextStack:
        value = LogContext.get(self.key)
        return value if isinstance(value, ContextStack) else ContextStack()

    def __len__(self) -> int:
        return len(self._stored())

    @property
    def count(self) -> int:
        return len(self)

    def push(self, value: Any) -> _Restore:
        """Push ``value`` and return a context manager restoring the prior stack."""
        previous = self._stored()
        LogContext.set(self.key, ContextStack([*previous.snapshot(), str(value)]))
        return _Restore(self.key, previous)

    def pop(self) -> str | None:
        items = self._stored().snapshot()
        if not items:
            return None
        value = items.pop()
        LogContext.set(self.key, ContextStack(items))
        return value

    def peek(self) -> str | None:
        return self._stored().peek()

    def clear(self) -> None:
        LogContext.set(self.key, ContextStack())

    def snapshot(self) -> list[str]:
        return self._stored().snapshot()


class LogContext:
    """Process-wide entry point to the ambient, per-scope context properties."""

    @staticmethod
    def _current() -> dict:
        return _properties_var.get() or {}

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        _properties_var.set({**cls._current(), key: value})

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        return cls._current().get(key, default)

    @classmethod
    def remove(cls, key: str) -> None:
        current = dict(cls._current())
        current.pop(key, None)
        _properties_var.set(current)

    @classmethod
    def clear(cls) -> None:
        _properties_var.set({})

    @classmethod
    def keys(cls) -> Iterator[str]:
        return iter(list(cls._current()))

    @classmethod
    def stack(cls, key: str) -> ScopedContextStack:
        """Return a handle on the stack under ``key``, creating it if needed."""
        if not isinstance(cls._current().get(key), ContextStack):
            cls.set(key, ContextStack())
        return ScopedContextStack(key)

    @classmethod
    def snapshot(cls) -> dict:
        return dict(cls._current())
