from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Optional, Tuple

from typing_extensions import Protocol, Self, TypeAlias, runtime_checkable

if TYPE_CHECKING:
    from .item import Item

Key: TypeAlias = Any
Fallback: TypeAlias = Optional[Callable[[], Any]]
ConflictResolver: TypeAlias = Callable[[str, Any, Any], Any]
Decorator: TypeAlias = Callable[[Any], Any]


class _Missing:
    """Sentinel type for "no value supplied"."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


@runtime_checkable
class RegistryProtocol(Protocol):
    """
    Defines the methods a Container needs from the object storing its items.
    """

    @property
    def frozen(self) -> bool: ...

    def set(self, key: Key, item: "Item") -> Self: ...

    def set_many(self, pairs: Iterable[Tuple[str, "Item"]]) -> Self: ...

    def replace(self, key: Key, item: "Item") -> Self: ...

    def update(self, pairs: Iterable[Tuple[str, "Item"]]) -> Self: ...

    def resolve(self, key: Key) -> "Item": ...

    def has(self, key: Key) -> bool: ...

    def keys(self) -> List[str]: ...

    def items(self) -> List[Tuple[str, "Item"]]: ...

    def freeze(self) -> Self: ...

    def copy(self) -> Self: ...


class ResolverProtocol(Protocol):
    """Turns a key lookup against a registry into a final value."""

    def __call__(self, registry: RegistryProtocol, key: Key, fallback: Fallback = None) -> Any: ...
