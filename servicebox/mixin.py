"""
Give any class container behaviour by delegating to an owned Container.

Per instance, with ContainerMixin:

class App(ContainerMixin):
    def __init__(self, name):
        self.name = name

app = App("web").register("db.url", "sqlite://")
app["db.url"]

The container is created on first use, so subclasses do not have to call
ContainerMixin.__init__.

Per class, with ClassContainerMixin:

class Services(ClassContainerMixin):
    pass

Services.register("db.url", "sqlite://")
Services.resolve("db.url")

Every subclass gets a container of its own, so registrations on a child
class are not seen by its parent and vice versa.

In both forms methods that return the container for chaining return the
host instead. The container itself (its config, registry and frozen state)
is reached through the container attribute, leaving names such as config
free for the host.
"""
import copy
from typing import Any, Callable, ClassVar, Type

from .container import Container
from .types import Key

_CONTAINER_ATTR = "_servicebox_container"

_FORWARDED = (
    "register",
    "resolve",
    "has",
    "keys",
    "items",
    "each",
    "each_key",
    "merge",
    "decorate",
    "namespace",
    "import_namespace",
    "configure",
    "freeze",
    "enable_stubs",
    "disable_stubs",
    "stub",
    "stubbed",
    "unstub",
)


def _forward(name: str, owner: str) -> Callable[..., Any]:
    def method(host: Any, *args: Any, **kwargs: Any) -> Any:
        container = host.container
        result = getattr(container, name)(*args, **kwargs)
        return host if result is container else result

    method.__name__ = name
    method.__qualname__ = f"{owner}.{name}"
    method.__doc__ = getattr(Container, name).__doc__
    return method


class ContainerMixin:
    """Mixin exposing the Container interface on the host object."""

    container_class: Type[Container] = Container

    @property
    def container(self) -> Container:
        """The container owned by this host, created on first access."""
        container = self.__dict__.get(_CONTAINER_ATTR)
        if container is None:
            container = self.__dict__.setdefault(_CONTAINER_ATTR, self.container_class())
        return container

    def __getitem__(self, key: Key) -> Any:
        return self.container.resolve(key)

    def __contains__(self, key: Key) -> bool:
        return self.container.has(key)

    def _with_container(self, container: Container) -> Any:
        duplicate = copy.copy(self)
        duplicate.__dict__[_CONTAINER_ATTR] = container
        return duplicate

    def dup(self) -> Any:
        return self._with_container(self.container.dup())

    def clone(self) -> Any:
        return self._with_container(self.container.clone())


class ClassContainerMixin:
    """Mixin exposing the Container interface as class methods.

    The container lives on the class; each subclass is given a fresh one
    when it is defined.
    """

    container_class: ClassVar[Type[Container]] = Container
    container: ClassVar[Container]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.container = cls.container_class()


for _name in _FORWARDED:
    setattr(ContainerMixin, _name, _forward(_name, "ContainerMixin"))
    setattr(ClassContainerMixin, _name, classmethod(_forward(_name, "ClassContainerMixin")))
