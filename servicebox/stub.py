"""Override layer used to swap container bindings out in tests."""
import logging
from threading import RLock
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import MagicMock

from typing_extensions import TypeAlias

from .item import Item, value_item
from .registry import normalize_key
from .types import Key

LOG = logging.getLogger(__name__)

MockingFunction: TypeAlias = Callable[[Any], Any]

DEFAULT_MOCKING_FUNCTION: MockingFunction = lambda value: MagicMock(spec=value)


class StubOverlay:
    """Substitute items shadowing registered keys of one container.

    The overlay never touches the container's registry, so removing a stub
    restores the original binding together with its memoized value.
    """

    def __init__(self, mocking_function: Optional[MockingFunction] = None) -> None:
        self._stubs: Dict[str, Item] = {}
        self._lock = RLock()
        self.mocking_function = mocking_function or DEFAULT_MOCKING_FUNCTION

    def get(self, key: Key) -> Optional[Item]:
        with self._lock:
            return self._stubs.get(normalize_key(key))

    def add(self, key: Key, value: Any) -> Optional[Item]:
        """Stub key with value, returning the stub it replaced (if any)."""
        key = normalize_key(key)
        LOG.debug("stubbing %s with %r", key, value)
        with self._lock:
            previous = self._stubs.get(key)
            self._stubs[key] = value_item(value)
        return previous

    def restore(self, key: Key, previous: Optional[Item]) -> None:
        """Put back the stub state captured by add()."""
        key = normalize_key(key)
        with self._lock:
            if previous is None:
                self._stubs.pop(key, None)
            else:
                self._stubs[key] = previous

    def remove(self, *keys: Key) -> None:
        """Remove the stubs for keys, or every stub when no key is given."""
        with self._lock:
            if not keys:
                LOG.debug("removing all stubs")
                self._stubs.clear()
                return
            for key in keys:
                LOG.debug("removing stub for %s", key)
                self._stubs.pop(normalize_key(key), None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._stubs)

    def __len__(self) -> int:
        return len(self.keys())

    def __repr__(self) -> str:
        return f"<StubOverlay keys={self.keys()!r}>"
