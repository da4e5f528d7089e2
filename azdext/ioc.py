"""A dependency injection container with nested scopes.

Resolvers are callables whose return annotation names the type they provide;
their parameters are resolved from the container by their annotations.
A class may be used as its own resolver.
"""

from __future__ import annotations

import types
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Optional, get_args, get_origin

_MISSING = object()


class ResolveError(LookupError):
    """Raised when the container cannot find a registration for a request."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"failed resolving instance from container: {detail}")
        self.detail = detail


class ServiceLocator(ABC):
    """Something that can resolve registered instances and call functions with them."""

    @abstractmethod
    def resolve(self, type_: Any) -> Any:
        """Return an instance of ``type_``."""

    @abstractmethod
    def resolve_named(self, name: str, type_: Any) -> Any:
        """Return the instance of ``type_`` registered under ``name``."""

    @abstractmethod
    def invoke(self, func: Callable[..., Any]) -> Any:
        """Call ``func`` with its arguments resolved and return its result."""


@dataclass(eq=False)
class _Binding:
    resolver: Callable[..., Any]
    singleton: bool
    concrete: Any = _MISSING

    def make(self, container: "NestedContainer") -> Any:
        if self.concrete is not _MISSING:
            return self.concrete
        instance = container._call(self.resolver)
        if self.singleton:
            self.concrete = instance
        return instance


@dataclass(frozen=True)
class _Registration:
    name: str
    resolver: Callable[..., Any]


@dataclass(frozen=True)
class _Param:
    name: str
    positional_only: bool
    default: Any
    annotation: Any


def _target(func: Any) -> tuple[Any, int]:
    """The plain function behind ``func`` and how many leading parameters it binds."""
    if isinstance(func, type):
        return func.__init__, 1
    if isinstance(func, types.MethodType):
        return func.__func__, 1
    if isinstance(func, types.FunctionType):
        return func, 0
    call = getattr(func, "__call__", None)
    if isinstance(call, types.MethodType):
        return call.__func__, 1
    return func, 0


def _annotations(func: Any) -> dict[str, Any]:
    target, _ = _target(func)
    return dict(getattr(target, "__annotations__", None) or {})


def _parameters(func: Any) -> list[_Param]:
    target, skip = _target(func)
    code = getattr(target, "__code__", None)
    if code is None:
        if isinstance(func, type):
            return []
        raise TypeError(f"cannot inspect the parameters of {func!r}")
    annotations = getattr(target, "__annotations__", None) or {}
    argcount = code.co_argcount
    positional = code.co_varnames[:argcount]
    keyword_only = code.co_varnames[argcount : argcount + code.co_kwonlyargcount]
    defaults = getattr(target, "__defaults__", None) or ()
    first_default = len(positional) - len(defaults)
    params: list[_Param] = []
    for index, name in enumerate(positional):
        if index < skip:
            continue
        default = defaults[index - first_default] if index >= first_default else _MISSING
        params.append(
            _Param(
                name,
                index < code.co_posonlyargcount,
                default,
                annotations.get(name, _MISSING),
            )
        )
    kwdefaults = getattr(target, "__kwdefaults__", None) or {}
    for name in keyword_only:
        params.append(
            _Param(name, False, kwdefaults.get(name, _MISSING), annotations.get(name, _MISSING))
        )
    return params


def _provided_type(resolver: Any) -> Any:
    if isinstance(resolver, type):
        return resolver
    if not callable(resolver):
        raise TypeError("the resolver must be callable")
    provided = _annotations(resolver).get("return")
    if provided is None or provided is type(None):
        raise TypeError(f"the resolver {resolver!r} must declare the type it returns")
    return provided


def _describe(type_: Any, name: str) -> str:
    label = getattr(type_, "__qualname__", repr(type_))
    return f"{label} named {name!r}" if name else label


class NestedContainer(ServiceLocator):
    """A container whose scopes share singletons with their parent."""

    def __init__(self, parent: Optional["NestedContainer"] = None) -> None:
        self._bindings: dict[tuple[Any, str], _Binding] = (
            dict(parent._bindings) if parent is not None else {}
        )
        self._scoped: list[_Registration] = []
        self.register_instance(ServiceLocator, self)

    def fill(self, obj: Any) -> None:
        """Set attributes annotated ``Annotated[T, "type"]`` or ``Annotated[T, "name"]``.

        ``"type"`` resolves ``T``; ``"name"`` resolves ``T`` registered under the
        attribute's name.
        """
        hints: dict[str, Any] = {}
        for klass in reversed(type(obj).__mro__):
            hints.update(klass.__dict__.get("__annotations__", {}))
        for attribute, hint in hints.items():
            if get_origin(hint) is not Annotated:
                continue
            base, *metadata = get_args(hint)
            if "type" in metadata:
                setattr(obj, attribute, self._make(base, ""))
            elif "name" in metadata:
                setattr(obj, attribute, self._make(base, attribute))

    def register_singleton(self, resolver: Callable[..., Any]) -> None:
        """Register a resolver whose instance is created once, on first use."""
        self._bind(resolver, "", singleton=True)

    def register_singleton_and_invoke(self, resolver: Callable[..., Any]) -> None:
        """Register a singleton resolver and create its instance now."""
        self._bind(resolver, "", singleton=True, eager=True)

    def register_named_singleton(self, name: str, resolver: Callable[..., Any]) -> None:
        """Register a named resolver whose instance is created once."""
        self._bind(resolver, name, singleton=True)

    def register_transient(self, resolver: Callable[..., Any]) -> None:
        """Register a resolver that creates a new instance on every resolution."""
        self._bind(resolver, "", singleton=False)

    def register_named_transient(self, name: str, resolver: Callable[..., Any]) -> None:
        """Register a named resolver that creates a new instance every time."""
        self._bind(resolver, name, singleton=False)

    def register_scoped(self, resolver: Callable[..., Any]) -> None:
        """Register a resolver with one instance per scope."""
        self._bind(resolver, "", singleton=True)
        self._scoped.append(_Registration("", resolver))

    def register_named_scoped(self, name: str, resolver: Callable[..., Any]) -> None:
        """Register a named resolver with one instance per scope."""
        self._bind(resolver, name, singleton=True)
        self._scoped.append(_Registration(name, resolver))

    def register_instance(self, type_: Any, instance: Any) -> None:
        """Register an existing instance as the singleton for ``type_``."""
        self._bindings[(type_, "")] = _Binding(lambda: instance, singleton=True)

    def register_named_instance(self, name: str, type_: Any, instance: Any) -> None:
        """Register an existing instance for ``type_`` under ``name``."""
        self._bindings[(type_, name)] = _Binding(lambda: instance, singleton=True)

    def resolve(self, type_: Any) -> Any:
        return self._make(type_, "")

    def resolve_named(self, name: str, type_: Any) -> Any:
        return self._make(type_, name)

    def invoke(self, func: Callable[..., Any]) -> Any:
        return self._call(func)

    def new_scope(self) -> "NestedContainer":
        """A child container sharing this one's registrations and singletons.

        Scoped registrations get fresh instances in the child.
        """
        child = NestedContainer(self)
        child._activate_scoped(self._scoped)
        return child

    def new_scope_registrations_only(self) -> "NestedContainer":
        """A child container with this one's registrations but no created instances."""
        child = new_registrations_only(self)
        child._activate_scoped(self._scoped)
        return child

    def _activate_scoped(self, registrations: list[_Registration]) -> None:
        for registration in registrations:
            self._bind(registration.resolver, registration.name, singleton=True)
            self._scoped.append(registration)

    def _bind(
        self,
        resolver: Callable[..., Any],
        name: str,
        singleton: bool,
        eager: bool = False,
    ) -> None:
        provided = _provided_type(resolver)
        binding = _Binding(resolver, singleton)
        if eager:
            binding.concrete = self._call(resolver)
        self._bindings[(provided, name)] = binding

    def _make(self, type_: Any, name: str) -> Any:
        try:
            binding = self._bindings[(type_, name)]
        except KeyError:
            raise ResolveError(f"no concrete found for: {_describe(type_, name)}") from None
        return binding.make(self)

    def _call(self, func: Callable[..., Any]) -> Any:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for param in _parameters(func):
            annotation = param.annotation
            if annotation is not _MISSING and (annotation, "") in self._bindings:
                value = self._make(annotation, "")
            elif param.default is not _MISSING:
                value = param.default
            else:
                raise ResolveError(
                    f"no concrete found for parameter {param.name!r} of {func!r}"
                )
            if param.positional_only:
                args.append(value)
            else:
                kwargs[param.name] = value
        return func(*args, **kwargs)


def new_registrations_only(source: Optional[NestedContainer]) -> NestedContainer:
    """A container with the registrations of ``source`` but none of its instances."""
    container = NestedContainer()
    if source is not None:
        for key, binding in source._bindings.items():
            container._bindings[key] = _Binding(binding.resolver, binding.singleton)
        container.register_instance(ServiceLocator, container)
    return container