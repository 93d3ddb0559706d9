"""
Namespaces group registrations under a common key prefix.

A namespace can be opened directly on a container, either with a builder
function or as a context manager:

container.namespace("db", lambda ns: ns.register("url", "sqlite://"))

with container.namespace("db") as ns:
    ns.register("url", "sqlite://")
    ns.register("engine", lambda: create_engine(ns["url"]))

or defined up front and imported later:

@namespace_of("db")
def database(ns):
    ns.register("url", "sqlite://")

container.import_namespace(database)

Registrations made inside a namespace are staged and only reach the
enclosing container once the builder (or with-block) finishes without
raising, so a failing builder leaves the container untouched.
"""
import logging
from contextlib import contextmanager
from typing import Any, Callable, ContextManager, Iterable, Iterator, Optional, Tuple, Union

from typing_extensions import Protocol

from .item import Item, build_item
from .registry import Registry, normalize_key
from .types import MISSING, Fallback, Key

LOG = logging.getLogger(__name__)

Builder = Callable[["NamespaceScope"], Any]


class _Target(Protocol):
    """Anything a namespace scope can commit its registrations into."""

    def resolve(self, key: Key, fallback: Fallback = None) -> Any: ...

    def has(self, key: Key) -> bool: ...

    def _register_items(self, pairs: Iterable[Tuple[str, Item]]) -> None: ...


def prefix_key(prefix: str, key: Key, separator: str) -> str:
    return f"{prefix}{separator}{normalize_key(key)}"


class NamespaceScope:
    """The registration scope handed to namespace builders."""

    def __init__(self, target: _Target, prefix: str, separator: str) -> None:
        self._target = target
        self._staged = Registry()
        self.prefix = prefix
        self.separator = separator

    def _full_key(self, key: Key) -> str:
        return prefix_key(self.prefix, key, self.separator)

    def register(
        self, key: Key, value: Any = MISSING, *, call: bool = True, memoize: bool = False
    ) -> Any:
        """Register value under key inside this namespace.

        Behaves like Container.register: without a value, returns a decorator
        registering the decorated function.
        """
        if value is MISSING:

            def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
                self.register(key, func, call=call, memoize=memoize)
                return func

            return decorator

        self._staged.set(key, build_item(value, call, memoize))
        return self

    def resolve(self, key: Key, fallback: Fallback = None) -> Any:
        """Resolve key relative to this namespace.

        Keys registered earlier in this scope are found first, anything else
        is looked up in the enclosing target under the prefixed key.
        """
        if self._staged.has(key):
            return self._staged.resolve(key).resolve()
        return self._target.resolve(self._full_key(key), fallback)

    def __getitem__(self, key: Key) -> Any:
        return self.resolve(key)

    def has(self, key: Key) -> bool:
        return self._staged.has(key) or self._target.has(self._full_key(key))

    def __contains__(self, key: Key) -> bool:
        return self.has(key)

    def namespace(
        self, prefix: Key, builder: Optional[Builder] = None
    ) -> Union["NamespaceScope", ContextManager["NamespaceScope"]]:
        """Open a nested namespace, see Container.namespace."""
        if builder is None:
            return open_namespace(self, prefix, self.separator)
        run_namespace(self, prefix, self.separator, builder)
        return self

    def import_namespace(self, namespace: "Namespace") -> "NamespaceScope":
        namespace.evaluate(self, self.separator)
        return self

    def _register_items(self, pairs: Iterable[Tuple[str, Item]]) -> None:
        self._staged.set_many(pairs)

    def commit(self) -> None:
        """Move every staged registration into the target under its prefixed key."""
        pairs = [(self._full_key(key), item) for key, item in self._staged.items()]
        LOG.debug("committing namespace %s (%d items)", self.prefix, len(pairs))
        self._target._register_items(pairs)

    def __repr__(self) -> str:
        return f"<NamespaceScope {self.prefix!r} keys={self._staged.keys()!r}>"


def run_namespace(target: _Target, prefix: Key, separator: str, builder: Builder) -> None:
    scope = NamespaceScope(target, normalize_key(prefix), separator)
    builder(scope)
    scope.commit()


@contextmanager
def open_namespace(target: _Target, prefix: Key, separator: str) -> Iterator[NamespaceScope]:
    scope = NamespaceScope(target, normalize_key(prefix), separator)
    yield scope
    scope.commit()


class Namespace:
    """A detached, prefixed batch of registrations.

    Parameters:
        prefix: the key prefix applied to every registration of the builder.
        builder: function receiving the NamespaceScope to register into.
    """

    def __init__(self, prefix: Key, builder: Builder) -> None:
        self.prefix = normalize_key(prefix)
        self.builder = builder

    def evaluate(self, target: _Target, separator: str) -> None:
        """Run the builder against target, committing under this prefix."""
        run_namespace(target, self.prefix, separator, self.builder)

    def __repr__(self) -> str:
        return f"<Namespace {self.prefix!r}>"


def namespace_of(prefix: Key) -> Callable[[Builder], Namespace]:
    """Decorator turning a builder function into a Namespace."""

    def wrap(builder: Builder) -> Namespace:
        return Namespace(prefix, builder)

    return wrap
