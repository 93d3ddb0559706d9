import logging
from typing import Any

from .errors import KeyNotFound
from .types import Fallback, Key, RegistryProtocol

LOG = logging.getLogger(__name__)


class Resolver:
    """Default strategy for turning a key into its resolved value.

    A container may be configured with any other callable taking the same
    arguments, e.g. to instrument lookups in tests.
    """

    def __call__(self, registry: RegistryProtocol, key: Key, fallback: Fallback = None) -> Any:
        """Resolve key against registry.

        Parameters:
            registry: the registry to look the key up in.
            key: the key to resolve.
            fallback: optional zero argument callable whose result is returned
                when the key is not registered.
        Returns:
            The resolved value of the item registered under key.
        Raises:
            KeyNotFound: if the key is missing and no fallback was given.
        """
        try:
            item = registry.resolve(key)
        except KeyNotFound:
            if fallback is None:
                raise
            LOG.debug("%s not registered, using fallback", key)
            return fallback()
        return item.resolve()

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"
