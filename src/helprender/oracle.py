"""Symbol oracle: on-demand class and method facts.

The renderer asks an external knowledge source for facts the documentation
tree does not carry: superclass chains, method argument lists, the file a
class is implemented in, and titles of cross-referenced documents. Any
object with the four ``lookup_*`` methods of :class:`SymbolOracle`
conforms.

Calls are synchronous and may block. A miss, or a failure, means "no
information": the renderer always talks to the oracle through
:class:`GuardedOracle`, which turns failures into empty answers.

Example:
    >>> oracle = StaticOracle(method_args={("Foo", "bar"): [MethodArg("x", "1")]})
    >>> oracle.lookup_method_args("Foo", "bar")
    [MethodArg(name='x', default='1')]

"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine, Mapping, Sequence
from typing import Any, NamedTuple, Protocol

from helprender.errors import OracleUnavailable
from helprender.utils.logger import get_logger

logger = get_logger(__name__)


class MethodArg(NamedTuple):
    """One method argument: name and default value as source text."""

    name: str
    default: str | None = None

    def format(self) -> str:
        """``name`` or ``name: default``."""
        if self.default is None:
            return self.name
        return f"{self.name}: {self.default}"


class SymbolOracle(Protocol):
    """Protocol for symbol knowledge sources.

    Implementations return empty answers (``[]`` or ``None``) when they know
    nothing, and may raise :class:`OracleUnavailable` when they cannot be
    reached.

    """

    def lookup_superclasses(self, class_id: str) -> Sequence[str]:
        """Superclass chain of ``class_id``, nearest first."""
        ...

    def lookup_method_args(self, owner_id: str, method: str) -> Sequence[MethodArg]:
        """Arguments of ``method`` defined on ``owner_id`` (class or metaclass)."""
        ...

    def lookup_implementing_file(self, class_id: str) -> str | None:
        """Path of the file implementing ``class_id``."""
        ...

    def lookup_document_title(self, document_id: str) -> str | None:
        """Human title of the document ``document_id``."""
        ...


class AsyncSymbolOracle(Protocol):
    """Same queries as :class:`SymbolOracle`, as coroutines."""

    async def lookup_superclasses(self, class_id: str) -> Sequence[str]: ...

    async def lookup_method_args(self, owner_id: str, method: str) -> Sequence[MethodArg]: ...

    async def lookup_implementing_file(self, class_id: str) -> str | None: ...

    async def lookup_document_title(self, document_id: str) -> str | None: ...


class NullOracle:
    """Oracle that knows nothing."""

    def lookup_superclasses(self, class_id: str) -> list[str]:
        return []

    def lookup_method_args(self, owner_id: str, method: str) -> list[MethodArg]:
        return []

    def lookup_implementing_file(self, class_id: str) -> str | None:
        return None

    def lookup_document_title(self, document_id: str) -> str | None:
        return None


class StaticOracle:
    """Oracle answering from in-memory tables.

    Useful for tests and for hosts that load a symbol index up front.
    Method arguments may be given as ``MethodArg`` or plain ``(name, default)``
    pairs.

    """

    __slots__ = ("_superclasses", "_method_args", "_files", "_titles")

    def __init__(
        self,
        *,
        superclasses: Mapping[str, Sequence[str]] | None = None,
        method_args: Mapping[tuple[str, str], Sequence[tuple[str, str | None]]] | None = None,
        files: Mapping[str, str] | None = None,
        titles: Mapping[str, str] | None = None,
    ) -> None:
        self._superclasses = dict(superclasses or {})
        self._method_args = {
            key: [MethodArg(*arg) for arg in args] for key, args in (method_args or {}).items()
        }
        self._files = dict(files or {})
        self._titles = dict(titles or {})

    def lookup_superclasses(self, class_id: str) -> list[str]:
        return list(self._superclasses.get(class_id, ()))

    def lookup_method_args(self, owner_id: str, method: str) -> list[MethodArg]:
        return list(self._method_args.get((owner_id, method), ()))

    def lookup_implementing_file(self, class_id: str) -> str | None:
        return self._files.get(class_id)

    def lookup_document_title(self, document_id: str) -> str | None:
        return self._titles.get(document_id)


class GuardedOracle:
    """Wrap an oracle so that no query can fail.

    ``OracleUnavailable`` and any other exception raised by the wrapped
    oracle are logged and answered with the empty result. Answers are
    checked against the protocol's shapes inside the same guard: ``None``
    becomes the empty result, and an answer of the wrong shape (a string
    where a list of names is expected, bare names instead of argument pairs)
    is logged and discarded.

    """

    __slots__ = ("_oracle",)

    def __init__(self, oracle: SymbolOracle) -> None:
        self._oracle = oracle

    @property
    def wrapped(self) -> SymbolOracle:
        return self._oracle

    def _ask(self, query: str, default: Any, check: Callable[[Any], Any], *args: str) -> Any:
        try:
            answer = getattr(self._oracle, query)(*args)
            return default if answer is None else check(answer)
        except OracleUnavailable as e:
            logger.debug("Oracle unavailable for %s%r: %s", query, args, e)
        except Exception:
            logger.debug("Oracle query %s%r failed", query, args, exc_info=True)
        return default

    def lookup_superclasses(self, class_id: str) -> list[str]:
        return self._ask("lookup_superclasses", [], _check_names, class_id)

    def lookup_method_args(self, owner_id: str, method: str) -> list[MethodArg]:
        return self._ask("lookup_method_args", [], _check_method_args, owner_id, method)

    def lookup_implementing_file(self, class_id: str) -> str | None:
        return self._ask("lookup_implementing_file", None, _check_text, class_id) or None

    def lookup_document_title(self, document_id: str) -> str | None:
        return self._ask("lookup_document_title", None, _check_text, document_id) or None


def _check_sequence(answer: Any) -> Sequence[Any]:
    if isinstance(answer, (str, bytes)) or not isinstance(answer, Sequence):
        raise TypeError(f"expected a list, got {type(answer).__name__}")
    return answer


def _check_names(answer: Any) -> list[str]:
    names = list(_check_sequence(answer))
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"expected a class name, got {name!r}")
    return names


def _check_method_args(answer: Any) -> list[MethodArg]:
    args: list[MethodArg] = []
    for arg in _check_sequence(answer):
        if isinstance(arg, MethodArg):
            args.append(arg)
            continue
        if (
            not isinstance(arg, tuple)
            or not 1 <= len(arg) <= 2
            or not isinstance(arg[0], str)
            or not (len(arg) == 1 or arg[1] is None or isinstance(arg[1], str))
        ):
            raise TypeError(f"expected a (name, default) pair, got {arg!r}")
        args.append(MethodArg(*arg))
    return args


def _check_text(answer: Any) -> str:
    if not isinstance(answer, str):
        raise TypeError(f"expected a string, got {type(answer).__name__}")
    return answer


def guard(oracle: SymbolOracle | None) -> GuardedOracle:
    """Return ``oracle`` wrapped in a GuardedOracle (NullOracle for None)."""
    if isinstance(oracle, GuardedOracle):
        return oracle
    return GuardedOracle(oracle if oracle is not None else NullOracle())


class AsyncOracleAdapter:
    """Expose an :class:`AsyncSymbolOracle` through the synchronous protocol.

    Each query blocks until the coroutine completes. By default coroutines
    run with ``asyncio.run``; pass ``loop`` to submit them to an event loop
    running in another thread instead, or ``run_async`` for a custom runner.

    The default runner cannot be used from a thread that is already running
    an event loop. There every query raises :class:`OracleUnavailable`
    (logged once per adapter at WARNING), so renders lose their oracle
    enrichments; pass ``loop`` in that case.

    """

    __slots__ = ("_oracle", "_runner", "_warned")

    def __init__(
        self,
        oracle: AsyncSymbolOracle,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        run_async: Callable[[Coroutine[Any, Any, Any]], Any] | None = None,
    ) -> None:
        self._oracle = oracle
        self._warned = False
        if run_async is not None:
            self._runner = run_async
        elif loop is not None:
            self._runner = lambda coro: asyncio.run_coroutine_threadsafe(coro, loop).result()
        else:
            self._runner = self._run

    def _run(self, coro: Coroutine[Any, Any, Any]) -> Any:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(coro)
        coro.close()
        if not self._warned:
            self._warned = True
            logger.warning(
                "Async oracle queried from a running event loop; "
                "pass loop= to AsyncOracleAdapter to enable lookups"
            )
        raise OracleUnavailable("event loop already running in this thread")

    def lookup_superclasses(self, class_id: str) -> Sequence[str]:
        return self._runner(self._oracle.lookup_superclasses(class_id))

    def lookup_method_args(self, owner_id: str, method: str) -> Sequence[MethodArg]:
        return self._runner(self._oracle.lookup_method_args(owner_id, method))

    def lookup_implementing_file(self, class_id: str) -> str | None:
        return self._runner(self._oracle.lookup_implementing_file(class_id))

    def lookup_document_title(self, document_id: str) -> str | None:
        return self._runner(self._oracle.lookup_document_title(document_id))


__all__ = [
    "AsyncOracleAdapter",
    "AsyncSymbolOracle",
    "GuardedOracle",
    "MethodArg",
    "NullOracle",
    "StaticOracle",
    "SymbolOracle",
    "guard",
]
