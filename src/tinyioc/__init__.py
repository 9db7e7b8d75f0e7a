"""Minimal inversion-of-control container.

Register named bindings (pre-built values, factories or type references) and
let the container build instances, resolving constructor dependencies from
their type annotations.

Exports:
- `Container`: binding registry and resolution engine (`bind`, `make`).
- `TypeDescriptorProvider`: protocol describing constructor shapes, with the
  `InspectDescriptorProvider` default and the hand-written
  `StaticDescriptorProvider`.
- `private_constructor`: marks an `__init__` the container must not call.
- The `ContainerError` family of exceptions.
"""

from ._container import Container
from ._descriptors import (
    InspectDescriptorProvider,
    ParameterDescriptor,
    StaticDescriptorProvider,
    TypeDescriptor,
    TypeDescriptorProvider,
    private_constructor,
)
from ._errors import (
    CircularDependencyError,
    ContainerError,
    DuplicateBindingError,
    MissingParameterError,
    NonPublicConstructorError,
    ResolutionError,
    UnboundNameError,
    UnknownResolutionError,
    UnresolvableBindingError,
)
from ._registry import Binding, BindingKind


__all__ = [
    "Binding",
    "BindingKind",
    "CircularDependencyError",
    "Container",
    "ContainerError",
    "DuplicateBindingError",
    "InspectDescriptorProvider",
    "MissingParameterError",
    "NonPublicConstructorError",
    "ParameterDescriptor",
    "ResolutionError",
    "StaticDescriptorProvider",
    "TypeDescriptor",
    "TypeDescriptorProvider",
    "UnboundNameError",
    "UnknownResolutionError",
    "UnresolvableBindingError",
    "private_constructor",
]
