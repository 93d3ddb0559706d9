"""Items pair a registered payload with the policy used to resolve it."""

import enum
import inspect
import logging
from threading import Lock
from typing import Any, Callable, Generic, Optional, TypeVar

from attr import define, field

from .errors import ConfigurationError
from .types import MISSING

LOG = logging.getLogger(__name__)

T = TypeVar("T")


class ItemKind(enum.Enum):
    """How an item turns its raw value into a resolved value.

    The kind is decided once, when the item is built, so resolution never has
    to probe a payload by calling it.
    """

    # returned verbatim
    VALUE = "value"
    # invoked with no arguments on every resolve (or once, when memoized)
    FACTORY = "factory"
    # a callable that needs arguments, handed back unevaluated
    DEFERRED = "deferred"


def _accepts_no_arguments(func: Callable[..., Any]) -> bool:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        # some builtins cannot be introspected, trust that they can be called
        return True
    try:
        signature.bind()
    except TypeError:
        return False
    return True


def classify(payload: Any, call: bool = True) -> ItemKind:
    """Decide the ItemKind of a payload."""
    if not call or not callable(payload):
        return ItemKind.VALUE
    if _accepts_no_arguments(payload):
        return ItemKind.FACTORY
    return ItemKind.DEFERRED


@define(eq=False)
class Item(Generic[T]):
    """A registered payload together with its resolution policy.

    A decorated item keeps the item it wraps in inner; its raw_value is then
    the decorator, applied to the resolved inner value.
    """

    raw_value: Any
    kind: ItemKind = ItemKind.VALUE
    memoize: bool = False
    inner: "Optional[Item]" = None
    _cache: Any = field(init=False, default=MISSING, repr=False)
    _lock: Lock = field(init=False, factory=Lock, repr=False)

    def __attrs_post_init__(self) -> None:
        if self.memoize and self.kind is not ItemKind.FACTORY:
            raise ConfigurationError(
                f"Memoize only supported for callables that accept no arguments, got {self.raw_value!r}"
            )

    @property
    def is_static(self) -> bool:
        """True when resolving never runs the payload."""
        return self.kind is not ItemKind.FACTORY

    @property
    def is_cached(self) -> bool:
        return self._cache is not MISSING

    def _produce(self) -> T:
        if self.inner is not None:
            return self.raw_value(self.inner.resolve())
        return self.raw_value()

    def resolve(self) -> T:
        if self.kind is not ItemKind.FACTORY:
            return self.raw_value
        if not self.memoize:
            return self._produce()

        if self._cache is MISSING:
            with self._lock:
                # another thread may have filled the cache while we waited
                if self._cache is MISSING:
                    self._cache = self._produce()
        return self._cache

    def decorated(self, decorator: Callable[[Any], Any]) -> "Item":
        """Build the item that replaces this one when it is decorated.

        Static items are decorated once, on first resolve. Factories keep
        their memoize flag: a memoized factory caches the decorated value, a
        plain one rebuilds the inner value and its decoration every time.
        """
        memoize = True if self.is_static else self.memoize
        return Item(decorator, ItemKind.FACTORY, memoize=memoize, inner=self)

    def copy(self) -> "Item[T]":
        """Return an independent item, decorated inner items included.

        A value already cached is carried over, later computations are not shared.
        """
        inner = self.inner.copy() if self.inner is not None else None
        clone: Item[T] = Item(self.raw_value, self.kind, self.memoize, inner)
        clone._cache = self._cache
        return clone


def build_item(payload: Any, call: bool = True, memoize: bool = False) -> Item:
    """Build an item for a payload registered with the given options.

    Raises:
        ConfigurationError: if memoize is requested for a payload that cannot
            be invoked with zero arguments.
    """
    kind = classify(payload, call)
    LOG.debug("building %s item for %r (memoize=%s)", kind.value, payload, memoize)
    return Item(payload, kind, memoize)


def value_item(value: Any) -> Item:
    """Build an item that always resolves to exactly value."""
    return Item(value, ItemKind.VALUE)
