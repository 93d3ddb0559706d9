from typing import Any, Mapping

from attr import Attribute, define, field, fields_dict
from typing_extensions import TypedDict

from .errors import ConfigurationError
from .registry import Registry
from .resolver import Resolver
from .types import RegistryProtocol, ResolverProtocol


class ContainerSettings(TypedDict, total=False):
    """Keyword settings accepted by Container() and Container.configure()."""

    # Store for the container's items, see types.RegistryProtocol.
    registry: RegistryProtocol
    # Callable used to resolve a key from the registry.
    resolver: ResolverProtocol
    # String placed between a namespace prefix and the keys registered in it.
    namespace_separator: str


def _check_registry(_instance: Any, attribute: "Attribute[Any]", value: Any) -> None:
    if not isinstance(value, RegistryProtocol):
        raise ConfigurationError(f"{attribute.name} must implement the registry interface, got {value!r}")


def _check_resolver(_instance: Any, attribute: "Attribute[Any]", value: Any) -> None:
    if not callable(value):
        raise ConfigurationError(f"{attribute.name} must be callable, got {value!r}")


def _check_separator(_instance: Any, attribute: "Attribute[Any]", value: Any) -> None:
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"{attribute.name} must be a non-empty string, got {value!r}")


@define
class ContainerConfig:
    """Manages the strategies used by a single container.

    Every config builds its own default Registry and Resolver so containers
    never share state unless they are explicitly configured to.
    """

    registry: RegistryProtocol = field(factory=Registry, validator=_check_registry)
    resolver: ResolverProtocol = field(factory=Resolver, validator=_check_resolver)
    namespace_separator: str = field(default=".", validator=_check_separator)

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> "ContainerConfig":
        config = cls()
        config.apply(settings)
        return config

    def apply(self, settings: Mapping[str, Any]) -> None:
        """Apply a mapping of settings to this config.

        Raises:
            ConfigurationError: for unknown setting names or invalid values.
        """
        known = fields_dict(type(self))
        for name, value in settings.items():
            if name not in known:
                raise ConfigurationError(f"unknown container setting {name!r}")
            setattr(self, name, value)

    def copy(self) -> "ContainerConfig":
        """Return a config sharing the strategies but owning a copied registry."""
        return ContainerConfig(
            registry=self.registry.copy(),
            resolver=self.resolver,
            namespace_separator=self.namespace_separator,
        )
