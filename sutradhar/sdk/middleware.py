"""Middleware chain wrapping every outbound Bot API call.

A middleware receives ``(method, params, next_)`` and either calls
``next_(method, params)`` to continue (optionally transforming the inputs or
the returned response) or returns its own response to short-circuit.  Nodes
run in registration order; the response flows back in reverse order, and the
innermost ``next_`` is the transport call::

    chain = MiddlewareChain().add(AuthMiddleware()).add(LoggingMiddleware())
    chain.execute("sendMessage", {"chat_id": 1, "text": "hi"}, transport.send)

Errors raised by any node or by the terminal call propagate unchanged.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol, runtime_checkable

from sutradhar.core.logger import SutradharLogger
from sutradhar.sdk.exceptions import ValidationException

# ── Types ────────────────────────────────────────────────────────────────────

Params = Mapping[str, Any]
NextHandler = Callable[[str, Params], Any]


@runtime_checkable
class Middleware(Protocol):
    """One node of the chain."""
    def handle(self, method: str, params: Params, next_: NextHandler) -> Any: ...  # noqa: E704


class FunctionMiddleware:
    """Adapts a plain ``func(method, params, next_)`` to :class:`Middleware`."""

    def __init__(self, func: Callable[[str, Params, NextHandler], Any]) -> None:
        self._func = func

    def __repr__(self) -> str:
        return f"FunctionMiddleware({getattr(self._func, '__name__', self._func)!r})"

    def handle(self, method: str, params: Params, next_: NextHandler) -> Any:
        return self._func(method, params, next_)


# ── Chain ────────────────────────────────────────────────────────────────────

class MiddlewareChain:
    """Ordered sequence of middleware nodes."""

    def __init__(self, middleware: Iterable[Any] = ()) -> None:
        self._nodes: list[Middleware] = []
        for node in middleware:
            self.add(node)

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self):
        return iter(list(self._nodes))

    def add(self, middleware: Any) -> MiddlewareChain:
        """Append *middleware*; it wraps every node added after it.

        Raises:
            ValidationException: If *middleware* has no ``handle`` method and
                is not callable.
        """
        if isinstance(middleware, Middleware) and callable(middleware.handle):
            self._nodes.append(middleware)
        elif callable(middleware):
            self._nodes.append(FunctionMiddleware(middleware))
        else:
            raise ValidationException(
                "Middleware must define handle(method, params, next_) or be callable.",
                parameter="middleware",
            )
        return self

    def execute(self, method: str, params: Params, terminal: NextHandler) -> Any:
        """Run *method*/*params* through every node, ending at *terminal*."""
        stack = terminal
        for node in reversed(self._nodes):
            stack = self._wrap(node, stack)
        return stack(method, params)

    @staticmethod
    def _wrap(node: Middleware, next_: NextHandler) -> NextHandler:
        def call(method: str, params: Params) -> Any:
            return node.handle(method, params, next_)
        return call


# ── Built-in middleware ──────────────────────────────────────────────────────

class DefaultParamsMiddleware:
    """Inject default parameters the caller did not pass.

    Example::

        DefaultParamsMiddleware({"parse_mode": "HTML"}, methods={"sendMessage"})
    """

    def __init__(self, defaults: Params, methods: Optional[Iterable[str]] = None) -> None:
        self._defaults = dict(defaults)
        self._methods = frozenset(methods) if methods is not None else None

    def handle(self, method: str, params: Params, next_: NextHandler) -> Any:
        if self._methods is not None and method not in self._methods:
            return next_(method, params)
        merged = {**self._defaults, **params}
        return next_(method, merged)


class LoggingMiddleware:
    """Log each outbound call with its duration."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or SutradharLogger.get_logger()

    def handle(self, method: str, params: Params, next_: NextHandler) -> Any:
        self._logger.debug("Calling Bot API", extra={"api_method": method, "param_keys": sorted(params)})
        started = time.monotonic()
        try:
            response = next_(method, params)
        except Exception as exc:
            self._logger.error(
                "Bot API call failed",
                extra={"api_method": method, "error": str(exc), "duration_ms": _elapsed_ms(started)},
            )
            raise
        self._logger.info("Bot API call succeeded", extra={"api_method": method, "duration_ms": _elapsed_ms(started)})
        return response


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
