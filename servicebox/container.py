"""The Container binds keys to values or factories and resolves them on demand."""
import logging
from contextlib import contextmanager
from typing import (
    Any,
    Callable,
    ContextManager,
    Iterable,
    Iterator,
    List,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
    overload,
)

from typing_extensions import Self

from .config import ContainerConfig
from .errors import ConfigurationError, FrozenRegistry, UnknownStubKey, UnsupportedOperation
from .item import Item, build_item, value_item
from .namespace import Builder, Namespace, NamespaceScope, open_namespace, prefix_key, run_namespace
from .registry import normalize_key
from .stub import StubOverlay
from .types import MISSING, ConflictResolver, Decorator, Fallback, Key, RegistryProtocol

LOG = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class Container:
    """Keyed store of values and lazily evaluated factories.

    Parameters:
        config: optional ContainerConfig to use instead of a fresh default one.
        settings: container settings (registry, resolver, namespace_separator)
            applied on top of the config.
    """

    # Overlay type attached by enable_stubs(), None disables stubbing.
    stub_overlay_class: Optional[Type[StubOverlay]] = StubOverlay

    def __init__(self, config: Optional[ContainerConfig] = None, **settings: Any) -> None:
        self._config = config if config is not None else ContainerConfig()
        self._config.apply(settings)
        self._stubs: Optional[StubOverlay] = None
        LOG.debug("initializing a new container")

    @property
    def config(self) -> ContainerConfig:
        return self._config

    @property
    def registry(self) -> RegistryProtocol:
        """The registry currently storing this container's items."""
        return self._config.registry

    def configure(
        self, configurator: Optional[Callable[[ContainerConfig], Any]] = None, **settings: Any
    ) -> Self:
        """Change the strategies used by this container.

        Parameters:
            configurator: optional function receiving the ContainerConfig to
                modify in place.
            settings: setting names mapped to their new values.
        Returns:
            The container itself.
        Raises:
            ConfigurationError: for unknown settings or invalid values, or if
                the registry of a frozen container would be replaced.

        Items registered before a registry change are moved into the new
        registry in their original order.
        """
        previous = self._config.registry
        if configurator is not None:
            configurator(self._config)
        self._config.apply(settings)

        current = self._config.registry
        if current is not previous:
            try:
                if previous.frozen:
                    raise ConfigurationError("cannot replace the registry of a frozen container")
                pairs = previous.items()
                if pairs:
                    current.set_many(pairs)
            except Exception:
                self._config.registry = previous
                raise
            LOG.debug("container registry replaced by %r", current)
        return self

    @overload
    def register(
        self, key: Key, *, call: bool = True, memoize: bool = False
    ) -> Callable[[F], F]: ...

    @overload
    def register(self, key: Key, value: Any, *, call: bool = True, memoize: bool = False) -> Self: ...

    def register(self, key, value=MISSING, *, call=True, memoize=False):
        """Register a value or factory under key.

        Parameters:
            key: the key to register, normalized to a string.
            value: the payload. Callables accepting zero arguments are called
                on every resolve, callables needing arguments are returned
                unevaluated and anything else is returned as is. When omitted
                a decorator is returned that registers the decorated function.
                Callables taking only *args, **kwargs or defaulted parameters
                count as zero-argument callables and are called; pass
                call=False to register them as values.
            call: False to always return the payload itself, even if callable.
            memoize: True to call the payload only once and reuse the result.
        Returns:
            The container, or a decorator when value is omitted.
        Raises:
            KeyConflict: if key is already registered.
            FrozenRegistry: if the container is frozen.
            ConfigurationError: if memoize is used with a payload that cannot
                be called without arguments.
        """
        if value is MISSING:

            def decorator(func: F) -> F:
                self.register(key, func, call=call, memoize=memoize)
                return func

            return decorator

        self.registry.set(key, build_item(value, call, memoize))
        return self

    def _register_items(self, pairs: Iterable[Tuple[str, Item]]) -> None:
        self.registry.set_many(pairs)

    def resolve(self, key: Key, fallback: Fallback = None) -> Any:
        """Resolve the value registered under key.

        Parameters:
            key: the key to resolve.
            fallback: optional zero argument callable used when key is missing.
        Raises:
            KeyNotFound: if key is missing and no fallback is given.
        """
        if self._stubs is not None:
            stub = self._stubs.get(key)
            if stub is not None:
                return stub.resolve()
        return self._config.resolver(self.registry, key, fallback)

    def __getitem__(self, key: Key) -> Any:
        return self.resolve(key)

    def has(self, key: Key) -> bool:
        return self.registry.has(key)

    def __contains__(self, key: Key) -> bool:
        return self.has(key)

    def keys(self) -> List[str]:
        """Registered keys in registration order."""
        return self.registry.keys()

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.keys())

    def items(self) -> Iterator[Tuple[str, Any]]:
        """Yield (key, resolved value) pairs.

        Iterates over a snapshot of the keys, resolving (and so memoizing)
        every entry.
        """
        for key in self.keys():
            yield key, self.resolve(key)

    def each_key(self, func: Callable[[str], Any]) -> Self:
        for key in self.keys():
            func(key)
        return self

    def each(self, func: Callable[[str, Any], Any]) -> Self:
        for key, value in self.items():
            func(key, value)
        return self

    def merge(
        self,
        other: "Container",
        namespace: Optional[Key] = None,
        on_conflict: Optional[ConflictResolver] = None,
    ) -> Self:
        """Copy every item of other into this container.

        Parameters:
            other: the container to copy from.
            namespace: optional prefix applied to every copied key.
            on_conflict: optional function called as
                on_conflict(key, existing_value, incoming_value) for keys
                present in both containers, whose result becomes the binding.
                Without it incoming items overwrite existing ones.
        Returns:
            The container itself.
        """
        separator = self._config.namespace_separator
        incoming = []
        for key, item in other.registry.items():
            if namespace is not None:
                key = prefix_key(normalize_key(namespace), key, separator)
            incoming.append((normalize_key(key), item.copy()))
        if self.frozen and incoming:
            raise FrozenRegistry(incoming[0][0], self.registry)

        if on_conflict is not None:
            incoming = [self._resolve_conflict(key, item, on_conflict) for key, item in incoming]

        LOG.debug("merging %d items (namespace=%s)", len(incoming), namespace)
        self.registry.update(incoming)
        return self

    def _resolve_conflict(
        self, key: str, incoming: Item, on_conflict: ConflictResolver
    ) -> Tuple[str, Item]:
        if not self.registry.has(key):
            return key, incoming

        existing = self.registry.resolve(key)
        left = existing.resolve()
        right = incoming.resolve()
        chosen = on_conflict(key, left, right)
        # keep the original item (and its policy) when one side wins outright
        if chosen is left:
            return key, existing
        if chosen is right:
            return key, incoming
        return key, value_item(chosen)

    @overload
    def decorate(self, key: Key) -> Callable[[F], F]: ...

    @overload
    def decorate(self, key: Key, decorator: Decorator) -> Self: ...

    def decorate(self, key, decorator=None):
        """Wrap the value resolved for key.

        Parameters:
            key: a registered key.
            decorator: a class (constructed with the value) or a callable
                (called with the value) whose result is resolved instead.
                When omitted a decorator is returned that applies the
                decorated function.
        Raises:
            KeyNotFound: if key is not registered.
            ConfigurationError: if decorator is not callable.
        """
        if decorator is None:

            def wrap(func: F) -> F:
                self.decorate(key, func)
                return func

            return wrap

        if not callable(decorator):
            raise ConfigurationError(
                f"Decorator needs to be a class or a callable, got {decorator!r}"
            )

        key = normalize_key(key)
        original = self.registry.resolve(key)
        LOG.debug("decorating %s with %r", key, decorator)
        self.registry.replace(key, original.decorated(decorator))
        return self

    def namespace(
        self, prefix: Key, builder: Optional[Builder] = None
    ) -> Union[Self, ContextManager[NamespaceScope]]:
        """Register items under prefix.

        With a builder, calls builder(scope) and commits its registrations,
        returning the container. Without one, returns a context manager
        yielding the scope and committing on exit.
        """
        separator = self._config.namespace_separator
        if builder is None:
            return open_namespace(self, prefix, separator)
        run_namespace(self, prefix, separator, builder)
        return self

    def import_namespace(self, namespace: Namespace) -> Self:
        namespace.evaluate(self, self._config.namespace_separator)
        return self

    def freeze(self) -> Self:
        """Prevent any further registration; resolution keeps working."""
        LOG.debug("freezing container")
        self.registry.freeze()
        return self

    @property
    def frozen(self) -> bool:
        return self.registry.frozen

    def _copy_with(self, config: ContainerConfig) -> Self:
        duplicate = type(self).__new__(type(self))
        duplicate.__dict__.update(self.__dict__)
        duplicate._config = config
        duplicate._stubs = None
        return duplicate

    def dup(self) -> Self:
        """Return an independent copy of this container.

        The copy owns a copied registry, so registrations on either side are
        not seen by the other. Stubs are not copied.
        """
        return self._copy_with(self._config.copy())

    __copy__ = dup

    def clone(self) -> Self:
        """Like dup(), except a frozen container shares its registry with the clone."""
        if not self.frozen:
            return self.dup()
        config = ContainerConfig(
            registry=self.registry,
            resolver=self._config.resolver,
            namespace_separator=self._config.namespace_separator,
        )
        return self._copy_with(config)

    def enable_stubs(self) -> Self:
        """Attach the stub overlay.

        Raises:
            UnsupportedOperation: if stub_overlay_class is None.
        """
        if self._stubs is None:
            if self.stub_overlay_class is None:
                raise UnsupportedOperation(f"{type(self).__name__} does not support stubbing")
            self._stubs = self.stub_overlay_class()
        return self

    def disable_stubs(self) -> Self:
        self._stubs = None
        return self

    def _overlay(self) -> StubOverlay:
        if self._stubs is None:
            raise UnsupportedOperation("stubs are not enabled, call enable_stubs() first")
        return self._stubs

    def _stub(self, overlay: StubOverlay, key: Key, value: Any) -> Tuple[Any, Optional[Item]]:
        key = normalize_key(key)
        if not self.registry.has(key):
            raise UnknownStubKey(key)
        if value is MISSING:
            value = overlay.mocking_function(self._config.resolver(self.registry, key))
        return value, overlay.add(key, value)

    def stub(self, key: Key, value: Any = MISSING) -> Self:
        """Resolve key to value until it is unstubbed.

        Parameters:
            key: a registered key.
            value: the substitute, returned verbatim. When omitted a MagicMock
                specced on the current value is used.
        Raises:
            UnsupportedOperation: if stubs are not enabled.
            UnknownStubKey: if key is not registered.
        """
        self._stub(self._overlay(), key, value)
        return self

    @contextmanager
    def stubbed(self, key: Key, value: Any = MISSING) -> Iterator[Any]:
        """Stub key for the duration of a with-block, yielding the substitute.

        The stub state of key from before the block is restored on exit, even
        if the block raises.
        """
        overlay = self._overlay()
        substitute, previous = self._stub(overlay, key, value)
        try:
            yield substitute
        finally:
            overlay.restore(key, previous)

    def unstub(self, *keys: Key) -> Self:
        """Remove the stubs for keys, or all stubs when called without keys."""
        self._overlay().remove(*keys)
        return self

    def __repr__(self) -> str:
        return f"<{type(self).__name__} keys={self.keys()!r} frozen={self.frozen}>"
