from __future__ import annotations

from typing import Any, ClassVar


class ContainerError(RuntimeError):
    """Base class of every error raised by the container."""

    code: ClassVar[str] = "container_error"


class DuplicateBindingError(ContainerError):
    code = "duplicate_binding"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name} is already registered.")


class CircularDependencyError(ContainerError):
    code = "circular_dependency"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Circular dependency detected for {name}.")


class UnboundNameError(ContainerError):
    code = "unbound_name"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name} is not bound in the container and is not an instantiable type.")


class UnresolvableBindingError(ContainerError):
    code = "unresolvable_binding"

    def __init__(self, name: str, binding: Any) -> None:
        self.name = name
        self.binding = binding
        super().__init__(f"{binding!r} is neither a callable, a pre-built object nor an instantiable type.")


class NonPublicConstructorError(ContainerError):
    code = "non_public_constructor"

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Unable to resolve: {type_name}'s constructor is not public.")


class MissingParameterError(ContainerError):
    code = "missing_parameter"

    def __init__(self, position: int, parameter: str, type_name: str) -> None:
        self.position = position
        self.parameter = parameter
        self.type_name = type_name
        super().__init__(f"Constructor parameter #{position} '{parameter}' for {type_name} is required.")


class UnknownResolutionError(ContainerError):
    code = "unknown"

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Unable to resolve {type_name}: unknown error.")


class ResolutionError(ContainerError):
    """Wraps a failure raised while resolving a named binding.

    The message and code of the wrapped error are kept; the wrapped error is
    also available as `cause` (and as `__cause__`).
    """

    code = "resolution_failed"

    def __init__(self, name: str, cause: BaseException) -> None:
        self.name = name
        self.cause = cause
        self.code = getattr(cause, "code", ResolutionError.code)  # type: ignore[misc]
        super().__init__(f"Unable to resolve {name}: {cause}")
