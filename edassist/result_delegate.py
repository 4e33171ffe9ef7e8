"""Routing of JavaScript execution results back to Python handlers."""

from __future__ import annotations

import threading
import uuid
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from edassist.binder import ScopedDelegateBinding, WebJavaScriptDelegateBinder


@dataclass(frozen=True)
class Result:
    """Result of a JavaScript execution."""

    json: str
    """JSON representation of the function's result or error object."""
    is_error: bool
    """Whether ``json`` describes an error."""


@dataclass(frozen=True)
class ResultHandlerContext(Result):
    """A result together with the ID of the handler it was delivered to."""

    handler_id: str = ""


ResultHandler = Callable[[ResultHandlerContext], bool]
"""Handles a result; returns True to unregister itself, False to stay registered."""


class WebJavaScriptResultDelegate:
    """Routes calls made from JavaScript to registered Python result handlers.

    Bind it to a JavaScript environment with ``bind()``, then register handlers and
    embed the output of ``format_javascript_handler()`` in scripts that report results.
    """

    NAME = "aiassistantresultdelegate"
    """Name under which the delegate is bound; lower case as bindings are lowered."""

    CANCELED_ERROR = '"canceled"'
    """JSON result given to futures that are canceled by ``unbind()``."""

    _HANDLE_RESULT_FUNCTION = "handleresult"

    def __init__(self) -> None:
        self._handlers_lock = threading.Lock()
        self._handlers: dict[str, ResultHandler] = {}
        self._pending_lock = threading.Lock()
        self._pending: dict[str, Future[Result]] = {}
        self._binding: Optional[ScopedDelegateBinding] = None

    def bind(self, binder: WebJavaScriptDelegateBinder) -> None:
        """Bind this delegate to ``binder`` as ``NAME``, replacing any earlier binding."""
        if self._binding is not None:
            self._binding.close()
            self._binding = None
        self._binding = ScopedDelegateBinding(binder, self.NAME, self, True)

    def unbind(self) -> None:
        """Unbind from the binder and cancel every pending future."""
        if self._binding is not None:
            binding, self._binding = self._binding, None
            binding.close()
        self._complete_all_pending()

    @staticmethod
    def _create_handler_id() -> str:
        return uuid.uuid4().hex.upper()

    def _register_with_id(self, handler: ResultHandler, handler_id: str) -> None:
        with self._handlers_lock:
            self._handlers[handler_id] = handler

    def register_result_handler(self, handler: ResultHandler) -> str:
        """Register ``handler`` and return the ID that JavaScript must report results to."""
        handler_id = self._create_handler_id()
        self._register_with_id(handler, handler_id)
        return handler_id

    def register_result_handler_for_future(self) -> Tuple[str, Future[Result]]:
        """Register a one-shot handler that completes the returned future."""
        handler_id = self._create_handler_id()
        future: Future[Result] = Future()
        with self._pending_lock:
            self._pending[handler_id] = future

        def complete(context: ResultHandlerContext) -> bool:
            self._try_complete_pending(context)
            return True

        self._register_with_id(complete, handler_id)
        return handler_id, future

    def handle_result(self, handler_id: str, result_json: str, is_error: bool) -> None:
        """Deliver a result to the handler registered as ``handler_id``, if any."""
        with self._handlers_lock:
            handler = self._handlers.get(handler_id)
        if handler is None:
            return
        context = ResultHandlerContext(result_json, is_error, handler_id)
        if handler(context):
            with self._handlers_lock:
                self._handlers.pop(handler_id, None)

    def format_javascript_handler(self, handler_id: str) -> str:
        """Return a format string that calls this delegate for ``handler_id``.

        ``{0}`` takes a JSON-serializable result object and ``{1}`` a value that is
        truthy when the result is an error.
        """
        return (
            f"window.ue.{self.NAME}.{self._HANDLE_RESULT_FUNCTION}"
            f'("{handler_id}", JSON.stringify({{0}}), {{1}});'
        )

    def handler_ids(self) -> list[str]:
        """Return the IDs of the handlers currently registered."""
        with self._handlers_lock:
            return list(self._handlers)

    def _complete_all_pending(self) -> None:
        with self._pending_lock:
            pending = list(self._pending.values())
            self._pending.clear()
        for future in pending:
            future.set_result(Result(self.CANCELED_ERROR, True))

    def _try_complete_pending(self, context: ResultHandlerContext) -> None:
        with self._pending_lock:
            future = self._pending.pop(context.handler_id, None)
        # Completed outside the lock so callbacks may register new handlers.
        if future is not None:
            future.set_result(context)