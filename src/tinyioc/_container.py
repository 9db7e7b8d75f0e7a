from __future__ import annotations

import contextlib
import inspect
import logging
import threading
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._descriptors import InspectDescriptorProvider, type_name
from ._errors import (
    CircularDependencyError,
    DuplicateBindingError,
    MissingParameterError,
    NonPublicConstructorError,
    ResolutionError,
    UnboundNameError,
    UnknownResolutionError,
    UnresolvableBindingError,
)
from ._guard import CycleGuard
from ._registry import Binding, BindingKind, BindingRegistry


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ._descriptors import TypeDescriptor, TypeDescriptorProvider

    T = TypeVar("T")

    Token = type[T] | str

_MISSING = object()


class Container:
    """Minimal IoC container.

    - bind pre-built values, factories or type references under a name
    - make instances, injecting constructor dependencies recursively
    - circular dependencies are detected and reported
    - the container resolves itself: `make(Container)` returns this container.
    """

    def __init__(self, *, descriptors: TypeDescriptorProvider | None = None) -> None:
        self._registry = BindingRegistry()
        self._guard = CycleGuard()
        self._descriptors: TypeDescriptorProvider = descriptors or InspectDescriptorProvider()
        self._lock = threading.RLock()

    def bind(self, token: Token[Any], binding: Any) -> None:
        """Bind a value, a factory or a type reference to a token.

        Example:
          container.bind("config", Config(debug=True))
          container.bind("db", lambda c: connect(c.make("config")))
          container.bind("repo", "myapp.repositories.SqlRepository")

        Classes and strings are always treated as type references; use
        `bind_instance` to bind one of them as a plain value.
        """
        with self._lock:
            self._registry.bind(Binding.classify(token, binding))

    def bind_instance(self, token: Token[Any], instance: object) -> None:
        """Bind a pre-built value, whatever its type."""
        with self._lock:
            self._registry.bind(Binding(token=token, payload=instance, kind=BindingKind.VALUE))

    def has(self, token: Token[Any]) -> bool:
        """Tell whether `make(token)` has something to work from."""
        with self._lock:
            if token in self._registry or self._is_self_reference(token):
                return True
            cls = self._find_type(token)
            return cls is not None and self._descriptors.describe(cls).is_instantiable

    @overload
    def make(self, token: type[T], *args: Any) -> T: ...

    @overload
    def make(self, token: str, *args: Any) -> object: ...

    def make(self, token: Token[T], *args: Any) -> object:
        """Resolve the token to an instance.

        - The container's own type resolves to this container.
        - A bound token resolves through its binding.
        - An unbound class, or import path of one, is constructed directly.
        `args` fill the required constructor parameters that carry no class
        annotation, in order.
        """
        with self._lock, self._guard.enter(token):
            if self._is_self_reference(token):
                return self._self_reference(token)

            binding = self._registry.lookup(token)
            if binding is not None:
                return self._make_bound(binding, args)

            cls = self._find_type(token)
            if cls is None or not self._descriptors.describe(cls).is_instantiable:
                raise UnboundNameError(type_name(token))

            return self._construct(cls, args)

    def _make_bound(self, binding: Binding, args: tuple[Any, ...]) -> object:
        name = type_name(binding.token)
        logger.debug("Resolving %s from %s binding", name, binding.kind.value)

        try:
            if binding.kind is BindingKind.VALUE:
                return binding.payload

            if binding.kind is BindingKind.FACTORY:
                return binding.payload(self)

            cls = self._find_type(binding.payload)
            if cls is not None and self._is_self_reference(cls):
                return self._self_reference(cls)
            if cls is None or not self._descriptors.describe(cls).is_instantiable:
                raise UnresolvableBindingError(name, binding.payload)

            return self._construct(cls, args)

        except (CircularDependencyError, UnboundNameError):
            raise
        except Exception as e:  # noqa: BLE001
            raise ResolutionError(name, e) from e

    def _self_reference(self, token: Token[Any]) -> Container:
        with contextlib.suppress(DuplicateBindingError):
            self._registry.bind(Binding(token=token, payload=self, kind=BindingKind.VALUE))
        return self

    def _is_self_reference(self, token: Token[Any]) -> bool:
        if isinstance(token, str):
            # matched by import path, without importing
            return token in _container_names(type(self))
        return inspect.isclass(token) and issubclass(token, Container) and isinstance(self, token)

    def _find_type(self, token: Token[Any]) -> type | None:
        if inspect.isclass(token):
            return token
        return self._descriptors.find_type(token)

    def _construct(self, cls: type[T], args: tuple[Any, ...]) -> T:
        return Constructor(self, self._descriptors).construct(cls, args)


class Constructor:
    """Builds one instance of a class, asking the container for its dependencies."""

    def __init__(self, resolver: Container, descriptors: TypeDescriptorProvider) -> None:
        self._resolver = resolver
        self._descriptors = descriptors

    def construct(self, cls: type[T], args: tuple[Any, ...]) -> T:
        descriptor = self._descriptors.describe(cls)
        name = type_name(cls)

        if not descriptor.has_constructor:
            return cls()

        if not descriptor.is_public:
            raise NonPublicConstructorError(name)

        if not descriptor.required_parameters:
            return cls(*args)

        positional, keywords = self._resolve_dependencies(descriptor, args)

        if not positional and not keywords:
            raise UnknownResolutionError(name)

        logger.debug("Constructing %s with %d resolved dependencies", name, len(positional) + len(keywords))
        return cls(*positional, **keywords)

    def _resolve_dependencies(
        self, descriptor: TypeDescriptor, args: tuple[Any, ...]
    ) -> tuple[list[Any], dict[str, Any]]:
        """Resolve required parameters in declaration order.

        Optional parameters are skipped and keep their defaults. Parameters
        with a type reference are made by the container; the others consume
        the supplied arguments one by one.
        """
        supplied = iter(args)
        positional: list[Any] = []
        keywords: dict[str, Any] = {}

        for p in descriptor.required_parameters:
            if p.type_reference is not None:
                value = self._resolver.make(p.type_reference)
            else:
                value = next(supplied, _MISSING)
                if value is _MISSING:
                    raise MissingParameterError(p.position, p.name, type_name(descriptor.cls))

            if p.keyword_only:
                keywords[p.name] = value
            else:
                positional.append(value)

        return positional, keywords


def _container_names(cls: type[Container]) -> set[str]:
    """Import paths under which `cls` and its container bases can be requested."""
    names = {f"{__package__}.Container", f"{__package__}:Container"}
    for base in cls.__mro__:
        if issubclass(base, Container):
            names.add(type_name(base))
            names.add(f"{base.__module__}:{base.__qualname__}")
    return names
