from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from ._descriptors import type_name
from ._errors import DuplicateBindingError


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    Token = type | str


class BindingKind(Enum):
    VALUE = "value"
    FACTORY = "factory"
    TYPE = "type"


@dataclass(frozen=True)
class Binding:
    token: Any
    payload: Any
    kind: BindingKind

    @classmethod
    def classify(cls, token: Token, payload: Any) -> Binding:
        """Build a binding, inferring its kind from the payload.

        - classes and strings are type references
        - other callables are factories, called with the container
        - anything else is a pre-built value
        """
        if inspect.isclass(payload) or isinstance(payload, str):
            kind = BindingKind.TYPE
        elif callable(payload):
            kind = BindingKind.FACTORY
        else:
            kind = BindingKind.VALUE
        return cls(token=token, payload=payload, kind=kind)


class BindingRegistry:
    """Name to binding mapping. A token may be bound only once."""

    def __init__(self) -> None:
        self._bindings: dict[Any, Binding] = {}

    def bind(self, binding: Binding) -> None:
        _validate_token(binding.token)

        if binding.token in self._bindings:
            raise DuplicateBindingError(type_name(binding.token))

        self._bindings[binding.token] = binding
        logger.debug("Bound %s as %s", type_name(binding.token), binding.kind.value)

    def lookup(self, token: Token) -> Binding | None:
        return self._bindings.get(token)

    def __contains__(self, token: object) -> bool:
        return token in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)


def _validate_token(token: object) -> None:
    if isinstance(token, str):
        if not token:
            msg = "Binding name must not be empty."
            raise ValueError(msg)
        return

    if not inspect.isclass(token):
        msg = f"Binding name must be a string or a class, got {token!r}"
        raise TypeError(msg)
