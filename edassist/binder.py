"""Exposing Python objects to a JavaScript execution environment."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any, Optional, Type


class WebJavaScriptDelegateBinder(ABC):
    """Makes an object reachable from JavaScript as ``window.ue.{name}``."""

    @abstractmethod
    def bind_object(self, name: str, obj: Any, is_permanent: bool = True) -> None:
        """Expose ``obj`` to JavaScript under ``name``."""

    @abstractmethod
    def unbind_object(self, name: str, obj: Any, is_permanent: bool = True) -> None:
        """Remove the object bound under ``name``."""


class ScopedDelegateBinding:
    """Binds an object on creation and unbinds it when closed."""

    def __init__(
        self,
        binder: WebJavaScriptDelegateBinder,
        name: str,
        obj: Any,
        is_permanent: bool = True,
    ) -> None:
        self.binder = binder
        self.name = name
        self.obj = obj
        self.is_permanent = is_permanent
        self._bound = False
        binder.bind_object(name, obj, is_permanent)
        self._bound = True

    @property
    def bound(self) -> bool:
        """Whether the object is still bound."""
        return self._bound

    def close(self) -> None:
        """Unbind the object; later calls do nothing."""
        if self._bound:
            self._bound = False
            self.binder.unbind_object(self.name, self.obj, self.is_permanent)

    def __enter__(self) -> ScopedDelegateBinding:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()