from __future__ import annotations

import builtins
import inspect
import logging
import pkgutil
import typing
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, get_type_hints


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable

    TypeReference = type | str

_PRIVATE_MARKER = "__tinyioc_private__"

# Annotations from these modules never name a dependency to construct.
_NON_INJECTABLE_MODULES = frozenset({"builtins", "typing", "types"})


def private_constructor(init: Callable[..., None]) -> Callable[..., None]:
    """Mark an `__init__` as non-public; the container refuses to call it.

    Example:
      class Connection:
          @private_constructor
          def __init__(self, dsn: str) -> None: ...

    """
    setattr(init, _PRIVATE_MARKER, True)
    return init


def type_name(reference: Any) -> str:
    """Printable name of a token or type reference."""
    if inspect.isclass(reference):
        return f"{reference.__module__}.{reference.__qualname__}"
    return str(reference)


@dataclass(frozen=True)
class ParameterDescriptor:
    """One constructor parameter, `self` excluded.

    `position` is 1-based and counts optional parameters too.
    `type_reference` is set when the parameter should be resolved through the
    container rather than taken from the supplied arguments.
    """

    position: int
    name: str
    is_optional: bool = False
    type_reference: TypeReference | None = None
    keyword_only: bool = False


@dataclass(frozen=True)
class TypeDescriptor:
    cls: type
    is_instantiable: bool
    has_constructor: bool
    is_public: bool
    parameters: tuple[ParameterDescriptor, ...] = ()

    @property
    def required_parameters(self) -> tuple[ParameterDescriptor, ...]:
        return tuple(p for p in self.parameters if not p.is_optional)


class TypeDescriptorProvider(Protocol):
    """Reports the constructor shape of types the container is asked to build."""

    def find_type(self, reference: TypeReference) -> type | None:
        """Return the class a type reference names, or None if it names no class."""
        ...

    def describe(self, cls: type) -> TypeDescriptor: ...


class InspectDescriptorProvider:
    """Describes classes by introspecting `__init__` signatures and type hints.

    - string references are import paths (`pkg.mod.Class` or `pkg.mod:Class`)
    - a parameter annotated with a non-builtin class is resolved by type
    - a parameter whose string annotation names nothing known keeps the string
      as a type reference, so resolving it reports the unknown name
    """

    def find_type(self, reference: TypeReference) -> type | None:
        if inspect.isclass(reference):
            return reference
        if not isinstance(reference, str) or not reference:
            return None

        try:
            found = pkgutil.resolve_name(reference)
        except (ImportError, AttributeError, ValueError):
            logger.debug("'%s' does not name an importable class", reference)
            return None

        return found if inspect.isclass(found) else None

    def describe(self, cls: type) -> TypeDescriptor:
        instantiable = _is_instantiable(cls)
        init = cls.__init__

        if init is object.__init__:
            return TypeDescriptor(cls=cls, is_instantiable=instantiable, has_constructor=False, is_public=True)

        public = not getattr(init, _PRIVATE_MARKER, False)

        try:
            signature = inspect.signature(init)
        except (TypeError, ValueError):
            # Builtin slot wrappers (e.g. subclasses of dict) expose no signature.
            logger.debug("No signature available for %s.__init__", cls.__qualname__)
            return TypeDescriptor(cls=cls, is_instantiable=instantiable, has_constructor=True, is_public=public)

        hints = _get_init_type_hints(cls, init, signature)
        parameters = []

        # The first parameter is `self`.
        for position, p in enumerate(list(signature.parameters.values())[1:], start=1):
            variadic = p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
            parameters.append(
                ParameterDescriptor(
                    position=position,
                    name=p.name,
                    is_optional=variadic or p.default is not p.empty,
                    type_reference=None if variadic else _as_type_reference(hints.get(p.name)),
                    keyword_only=p.kind is p.KEYWORD_ONLY,
                )
            )

        return TypeDescriptor(
            cls=cls,
            is_instantiable=instantiable,
            has_constructor=True,
            is_public=public,
            parameters=tuple(parameters),
        )


class StaticDescriptorProvider:
    """Constructor shapes registered by hand.

    Useful for types whose `__init__` cannot be introspected, or to pin the
    dependencies of a type without relying on its annotations. Classes that
    were not registered are delegated to `fallback` when one is given.

    Example:
      provider = StaticDescriptorProvider()
      provider.register(Repo, ParameterDescriptor(1, "db", type_reference=Database))
      container = Container(descriptors=provider)

    """

    def __init__(self, fallback: TypeDescriptorProvider | None = None) -> None:
        self._descriptors: dict[type, TypeDescriptor] = {}
        self._names: dict[str, type] = {}
        self._fallback = fallback

    def register(
        self,
        cls: type,
        *parameters: ParameterDescriptor,
        public: bool = True,
        name: str | None = None,
    ) -> None:
        if not inspect.isclass(cls):
            msg = f"Only classes can be described, got {cls!r}"
            raise TypeError(msg)

        positions = [p.position for p in parameters]
        if positions != list(range(1, len(parameters) + 1)):
            msg = f"Parameters of {cls.__qualname__} must be numbered 1..{len(parameters)}, got {positions}"
            raise ValueError(msg)

        self._descriptors[cls] = TypeDescriptor(
            cls=cls,
            is_instantiable=True,
            has_constructor=True,
            is_public=public,
            parameters=tuple(parameters),
        )
        self._names[name or type_name(cls)] = cls

    def find_type(self, reference: TypeReference) -> type | None:
        if isinstance(reference, str) and reference in self._names:
            return self._names[reference]
        if inspect.isclass(reference) and reference in self._descriptors:
            return reference
        if self._fallback is not None:
            return self._fallback.find_type(reference)
        return None

    def describe(self, cls: type) -> TypeDescriptor:
        descriptor = self._descriptors.get(cls)
        if descriptor is not None:
            return descriptor
        if self._fallback is not None:
            return self._fallback.describe(cls)

        # Unknown to this provider: never constructed.
        return TypeDescriptor(cls=cls, is_instantiable=False, has_constructor=False, is_public=False)


def _is_instantiable(cls: type) -> bool:
    return inspect.isclass(cls) and not inspect.isabstract(cls) and not _is_protocol(cls)


def _as_type_reference(annotation: Any) -> TypeReference | None:
    if isinstance(annotation, str):
        # forward reference that could not be looked up
        return annotation
    if inspect.isclass(annotation) and getattr(annotation, "__module__", "") not in _NON_INJECTABLE_MODULES:
        return annotation
    return None


def _get_init_type_hints(cls: type, init: Callable[..., Any], signature: inspect.Signature) -> dict[str, Any]:
    try:
        hints = get_type_hints(init)
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s (%s) type hints", exc.name, cls.__name__, cls.__qualname__)
        hints = _lookup_annotations(init, signature)

    return hints


def _lookup_annotations(init: Callable[..., Any], signature: inspect.Signature) -> dict[str, Any]:
    """Look string annotations up by name, keeping the unknown ones as strings.

    Only bare names defined in the module of `__init__` (or builtins) are
    looked up; anything else stays a string reference.
    """
    namespace = {**vars(builtins), **getattr(init, "__globals__", {})}
    hints: dict[str, Any] = {}

    for name, p in signature.parameters.items():
        if p.annotation is p.empty:
            continue
        if isinstance(p.annotation, str) and p.annotation.isidentifier():
            hints[name] = namespace.get(p.annotation, p.annotation)
        else:
            hints[name] = p.annotation

    return hints


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def _is_protocol(tp: type) -> bool:
        return typing.is_protocol(tp)

else:

    def _is_protocol(tp: type) -> bool:
        """Detect whether 'tp' is a typing.Protocol class (concrete implementations excluded)."""
        return bool(getattr(tp, "_is_protocol", False))
