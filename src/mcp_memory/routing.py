"""
Method routing and registration for the Memory MCP Server.

This module provides:
- Method: the closed set of supported method names
- MethodRegistry: maps each Method to a handler and its params model
- @method_handler: a decorator for registering handlers
- Parameter validation and handler dispatch with error wrapping
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from mcp_memory.errors import (
    InternalError,
    InvalidArgumentError,
    MethodError,
    MethodNotFoundError,
)

if TYPE_CHECKING:
    from mcp_memory.context import RequestContext

# Handlers receive the validated params model, or the raw params dict when the
# method declares no model.
MethodHandler = Callable[["RequestContext", Any], Awaitable[Any]]

# Default global registry (singleton)
_default_registry: MethodRegistry | None = None


class Method(str, Enum):
    """Closed set of methods served by the dispatcher."""

    STORE_SET = "store.set"
    STORE_GET = "store.get"
    STORE_LIST = "store.list"
    STORE_CLEAR = "store.clear"
    ECHO = "echo"
    HEALTH = "health"


# Bare method names accepted by earlier memory server releases
LEGACY_ALIASES: dict[str, Method] = {
    "store": Method.STORE_SET,
    "retrieve": Method.STORE_GET,
    "list": Method.STORE_LIST,
    "clear": Method.STORE_CLEAR,
}


@dataclass(frozen=True)
class MethodSpec:
    """
    A registered method.

    Attributes:
        method: The method this entry serves.
        handler: Async handler function.
        params_model: Pydantic model the params are validated against, or
            None to pass the raw params dict through.
    """

    method: Method
    handler: MethodHandler
    params_model: type[BaseModel] | None = None

    def validate_params(self, params: dict[str, Any]) -> Any:
        """
        Validate params against the declared model.

        Args:
            params: Raw params object from the request envelope.

        Returns:
            A model instance, or params unchanged when no model is declared.

        Raises:
            InvalidArgumentError: If validation fails.
        """
        if self.params_model is None:
            return params
        try:
            return self.params_model.model_validate(params)
        except ValidationError as e:
            raise validation_error_to_invalid_argument(self.method, e) from e


def validation_error_to_invalid_argument(
    method: Method, error: ValidationError
) -> InvalidArgumentError:
    """
    Convert a pydantic ValidationError into an InvalidArgumentError.

    The message describes the first failing field; every failure is listed in
    the details.

    Args:
        method: Method whose params failed validation.
        error: The pydantic validation error.

    Returns:
        InvalidArgumentError ready to raise.
    """
    problems = error.errors(include_url=False, include_input=False)
    fields = [".".join(str(part) for part in problem["loc"]) for problem in problems]

    first = problems[0]
    first_field = fields[0] or "params"
    if first["type"] == "missing":
        message = f"missing required field: {first_field}"
    else:
        message = f"invalid field '{first_field}': {first['msg']}"

    return InvalidArgumentError(
        message=message,
        details={
            "method": method.value,
            "errors": [
                {"field": name, "type": problem["type"], "message": problem["msg"]}
                for name, problem in zip(fields, problems, strict=True)
            ],
        },
    )


class MethodRegistry:
    """
    Registry mapping Method members to handlers.

    Example:
        >>> registry = MethodRegistry()
        >>> registry.register(Method.HEALTH, health_handler)
        >>> result = await registry.invoke(Method.HEALTH, ctx, {})
    """

    def __init__(self) -> None:
        """Initialize an empty method registry."""
        self._specs: dict[Method, MethodSpec] = {}

    def register(
        self,
        method: Method,
        handler: MethodHandler,
        params_model: type[BaseModel] | None = None,
    ) -> None:
        """
        Register a handler for a method.

        Args:
            method: Method member (or its string value).
            handler: Async function that handles the call.
            params_model: Optional pydantic model for the params.

        Raises:
            ValueError: If the name is not a Method or is already registered.
        """
        method = Method(method)
        if method in self._specs:
            raise ValueError(f"Method '{method.value}' is already registered")
        self._specs[method] = MethodSpec(method, handler, params_model)

    def resolve(self, name: str, *, allow_aliases: bool = True) -> Method | None:
        """
        Resolve a requested method name to a Method member.

        Matching is case-sensitive.

        Args:
            name: Method name as sent by the caller.
            allow_aliases: Whether legacy bare names are accepted.

        Returns:
            The Method member, or None if the name is unknown.
        """
        try:
            return Method(name)
        except ValueError:
            pass
        if allow_aliases:
            return LEGACY_ALIASES.get(name)
        return None

    def get_spec(self, method: Method | str) -> MethodSpec | None:
        """
        Get the registered entry for a method.

        Args:
            method: Method member or name.

        Returns:
            The MethodSpec, or None if not registered.
        """
        return self._specs.get(method)  # type: ignore[call-overload]

    def missing_methods(self) -> list[Method]:
        """Return the Method members that have no handler registered."""
        return [method for method in Method if method not in self]

    async def invoke(
        self,
        method: Method | str,
        ctx: RequestContext,
        params: dict[str, Any],
    ) -> Any:
        """
        Validate params and invoke the handler for a method.

        Args:
            method: Method member or canonical name.
            ctx: RequestContext for the call.
            params: Raw params object.

        Returns:
            The handler's return value.

        Raises:
            MethodNotFoundError: If no handler is registered.
            InvalidArgumentError: If params fail validation.
            MethodError: If the handler raises one.
            InternalError: If the handler raises anything else.
        """
        spec = self.get_spec(method)
        if spec is None:
            raise MethodNotFoundError(str(getattr(method, "value", method)))

        validated = spec.validate_params(params)

        try:
            return await spec.handler(ctx, validated)
        except MethodError:
            raise
        except Exception as e:
            raise InternalError(
                message=f"Internal error in method '{spec.method.value}': {e!s}",
                details={
                    "method": spec.method.value,
                    "exception_type": type(e).__name__,
                },
            ) from e

    def __contains__(self, method: object) -> bool:
        """Check if a method is registered (for 'in' operator)."""
        return method in self._specs

    def __len__(self) -> int:
        """Return the number of registered methods."""
        return len(self._specs)


def get_default_registry() -> MethodRegistry:
    """
    Get the default global method registry.

    Handler modules register into this registry at import time through the
    @method_handler decorator.

    Returns:
        The default MethodRegistry instance.
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = MethodRegistry()
    return _default_registry


def method_handler(
    method: Method,
    *,
    params: type[BaseModel] | None = None,
    registry: MethodRegistry | None = None,
) -> Callable[[MethodHandler], MethodHandler]:
    """
    Decorator for registering a function as a method handler.

    Args:
        method: Method the handler serves.
        params: Optional pydantic model for the params.
        registry: Optional MethodRegistry (defaults to the global registry).

    Returns:
        Decorator function that registers the handler.

    Example:
        >>> @method_handler(Method.STORE_GET, params=StoreGetParams)
        ... async def handle_store_get(ctx: RequestContext, params: StoreGetParams) -> dict:
        ...     return {"value": ctx.store.get(params.key)}
    """

    def decorator(handler: MethodHandler) -> MethodHandler:
        target_registry = registry if registry is not None else get_default_registry()
        target_registry.register(method, handler, params)
        return handler

    return decorator


def build_registry() -> MethodRegistry:
    """
    Return the default registry with every built-in handler registered.

    Returns:
        The populated default registry.

    Raises:
        RuntimeError: If any Method member has no handler.
    """
    # Importing the package registers the handlers
    import mcp_memory.methods  # noqa: F401

    registry = get_default_registry()
    missing = registry.missing_methods()
    if missing:
        raise RuntimeError(
            "No handler registered for: " + ", ".join(m.value for m in missing)
        )
    return registry
