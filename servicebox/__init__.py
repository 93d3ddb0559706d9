"""
The Container is a small service registry binding keys to values or factories.

Instead of wiring singletons into module globals, register how to build each
service once and resolve it by key wherever it is needed. Tests can then
swap any binding out without touching the code under test.

from servicebox import Container
container = Container()

Plain values are returned as is, and callables that take no arguments are
called every time the key is resolved:

container.register("settings.url", "http://localhost")
container.register("client", lambda: ApiClient(container["settings.url"]))
client = container["client"]

Pass memoize=True to build a value only once, or call=False to keep a
callable as the value itself. Functions can also be registered with the
decorator form:

@container.register("cache", memoize=True)
def make_cache():
    return Cache(size=100)

Related keys can be grouped under a prefix with namespaces, which nest:

with container.namespace("db") as db:
    db.register("url", "sqlite://")
container["db.url"]

Resolved values can be wrapped after the fact with decorate(), containers can
be combined with merge(), and freeze() stops any further registration.

For tests, enable the stub overlay and replace bindings temporarily:

container.enable_stubs()
with container.stubbed("client", FakeClient()):
    ...
"""

__version__ = "1.0.0"

from .config import ContainerConfig
from .container import Container
from .errors import (
    ConfigurationError,
    ContainerError,
    FrozenRegistry,
    KeyConflict,
    KeyNotFound,
    UnknownStubKey,
    UnsupportedOperation,
)
from .item import Item, ItemKind
from .mixin import ClassContainerMixin, ContainerMixin
from .namespace import Namespace, NamespaceScope, namespace_of
from .registry import Registry
from .resolver import Resolver
from .stub import StubOverlay

__all__ = [
    "ClassContainerMixin",
    "ConfigurationError",
    "Container",
    "ContainerConfig",
    "ContainerError",
    "ContainerMixin",
    "FrozenRegistry",
    "Item",
    "ItemKind",
    "KeyConflict",
    "KeyNotFound",
    "Namespace",
    "NamespaceScope",
    "Registry",
    "Resolver",
    "StubOverlay",
    "UnknownStubKey",
    "UnsupportedOperation",
    "namespace_of",
]
