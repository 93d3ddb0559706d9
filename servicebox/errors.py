"""Exceptions raised by containers and their registries."""

import difflib
from typing import Any, List, Optional


class ContainerError(Exception):
    """Base class for every error raised by servicebox."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        # KeyError subclasses would otherwise render the repr of the message
        return self.message


class KeyConflict(ContainerError, KeyError):
    """Raised when registering a key that is already present."""

    def __init__(self, key: str) -> None:
        super().__init__(f"There is already an item registered with the key {key!r}")
        self.key = key


class KeyNotFound(ContainerError, KeyError):
    """Raised when resolving a key that was never registered.

    Carries the attempted key, the registry that was searched and a list of
    near-matching keys to help with typos.
    """

    def __init__(self, key: str, receiver: Any = None) -> None:
        self.key = key
        self.receiver = receiver
        self.suggestions = self._suggest(key, receiver)
        message = f"Nothing registered with the key {key!r}"
        if self.suggestions:
            message += "\nDid you mean? " + ", ".join(self.suggestions)
        super().__init__(message)

    @staticmethod
    def _suggest(key: str, receiver: Optional[Any]) -> List[str]:
        if receiver is None or not hasattr(receiver, "keys"):
            return []
        return difflib.get_close_matches(key, list(receiver.keys()), n=3)


class FrozenRegistry(ContainerError):
    """Raised when registering into a frozen registry."""

    def __init__(self, key: str, receiver: Any = None) -> None:
        name = type(receiver).__name__ if receiver is not None else "registry"
        super().__init__(f"can't modify frozen {name} (when attempting to register {key!r})")
        self.key = key
        self.receiver = receiver


class ConfigurationError(ContainerError, ValueError):
    """Raised when a registration or container setting is invalid."""


class UnsupportedOperation(ContainerError, NotImplementedError):
    """Raised when an optional capability is used without being attached."""


class UnknownStubKey(ContainerError, ValueError):
    """Raised when stubbing a key that is not registered."""

    def __init__(self, key: str) -> None:
        super().__init__(f'cannot stub "{key}" - no such key in container')
        self.key = key
