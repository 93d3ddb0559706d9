"""The Registry is the ordered, thread-safe store of a container's items."""
import enum
import functools
import logging
from threading import RLock
from typing import Callable, Dict, Iterable, Iterator, List, Tuple, TypeVar

from typing_extensions import Concatenate, ParamSpec

from .errors import FrozenRegistry, KeyConflict, KeyNotFound
from .item import Item
from .types import Key

LOG = logging.getLogger(__name__)

R = TypeVar("R")
P = ParamSpec("P")


def normalize_key(key: Key) -> str:
    """Return the canonical string form of a key.

    Strings are used as is, enum members by their value and anything else by
    its str() so that equivalent spellings address the same entry.
    """
    if isinstance(key, str):
        return key
    if isinstance(key, enum.Enum):
        return normalize_key(key.value)
    return str(key)


def _synchronized(
    func: Callable[Concatenate["Registry", P], R]
) -> Callable[Concatenate["Registry", P], R]:
    """Decorator to synchronize method access with a reentrant lock."""

    @functools.wraps(func)
    def wrapper(self: "Registry", *args: P.args, **kwargs: P.kwargs) -> R:
        with self._lock:
            return func(self, *args, **kwargs)

    return wrapper


class Registry:
    """Tracks registered items by key, in insertion order."""

    def __init__(self) -> None:
        self._items: Dict[str, Item] = {}
        self._frozen = False
        self._lock = RLock()

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_writable(self, key: str) -> None:
        if self._frozen:
            raise FrozenRegistry(key, self)

    @_synchronized
    def set(self, key: Key, item: Item) -> "Registry":
        """Register a new item under key.

        Raises:
            FrozenRegistry: if the registry has been frozen.
            KeyConflict: if key is already registered.
        """
        key = normalize_key(key)
        self._check_writable(key)
        if key in self._items:
            raise KeyConflict(key)
        LOG.debug("registering %s -> %r", key, item)
        self._items[key] = item
        return self

    @_synchronized
    def set_many(self, pairs: Iterable[Tuple[Key, Item]]) -> "Registry":
        """Register several items at once; nothing is stored if any key fails."""
        staged = [(normalize_key(key), item) for key, item in pairs]
        seen = set()
        for key, _ in staged:
            self._check_writable(key)
            if key in self._items or key in seen:
                raise KeyConflict(key)
            seen.add(key)
        for key, item in staged:
            LOG.debug("registering %s -> %r", key, item)
            self._items[key] = item
        return self

    @_synchronized
    def replace(self, key: Key, item: Item) -> "Registry":
        """Store item under key, overwriting any existing entry in place."""
        key = normalize_key(key)
        self._check_writable(key)
        self._items[key] = item
        return self

    @_synchronized
    def update(self, pairs: Iterable[Tuple[Key, Item]]) -> "Registry":
        """Store several items, overwriting existing entries."""
        staged = [(normalize_key(key), item) for key, item in pairs]
        if staged:
            self._check_writable(staged[0][0])
        self._items.update(staged)
        return self

    @_synchronized
    def resolve(self, key: Key) -> Item:
        """Get the item registered under key.

        Raises:
            KeyNotFound: if nothing is registered under key.
        """
        key = normalize_key(key)
        try:
            return self._items[key]
        except KeyError:
            raise KeyNotFound(key, self) from None

    @_synchronized
    def has(self, key: Key) -> bool:
        return normalize_key(key) in self._items

    def __contains__(self, key: Key) -> bool:
        return self.has(key)

    @_synchronized
    def keys(self) -> List[str]:
        return list(self._items)

    @_synchronized
    def items(self) -> List[Tuple[str, Item]]:
        """Snapshot of (key, item) pairs in registration order."""
        return list(self._items.items())

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    @_synchronized
    def __len__(self) -> int:
        return len(self._items)

    @_synchronized
    def freeze(self) -> "Registry":
        self._frozen = True
        return self

    @_synchronized
    def copy(self) -> "Registry":
        """Return an unfrozen registry holding copies of every item."""
        duplicate = type(self)()
        duplicate._items = {key: item.copy() for key, item in self._items.items()}
        return duplicate

    def __repr__(self) -> str:
        return f"<{type(self).__name__} keys={self.keys()!r} frozen={self._frozen}>"
