from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import wraps
import os
from typing import Concatenate, ParamSpec, TypeVar

from .errors import ContextError, MissingValueError

_T = TypeVar("_T")
_R = TypeVar("_R")
_S = ParamSpec("_S")

# ValueError covers embedded null bytes, failed UTF-8 decoding and failed prefix stripping
NATIVE_ERRORS: tuple[type[Exception], ...] = (OSError, ValueError)
_ANNOTATABLE = (*NATIVE_ERRORS, ContextError)

PathArg = str | os.PathLike[str]


def quote(path: PathArg) -> str:
    """Quote a path for use inside an error annotation.

    >>> quote("/foo/bar.txt")
    "'/foo/bar.txt'"

    :param path: The path to quote
    :returns: The repr of the path's string form
    """
    return repr(os.fspath(path))


def processing(path: PathArg) -> str:
    """Return the standard annotation for a failure on a single path."""
    return f"while processing path {quote(path)}"


@contextmanager
def annotate(context: str) -> Iterator[None]:
    """Re-raise any native failure (or already-annotated failure) inside the block with one more annotation.

    Nesting blocks nests the annotations, the outermost block giving the outermost annotation:

    >>> with annotate("while processing path '/foo/bar.txt'"), annotate("with prefix '/bananas'"):
    ...     os.stat("/bananas/bar.txt")

    raises a ContextError rendered as
    "while processing path '/foo/bar.txt': with prefix '/bananas': [Errno 2] No such file or directory: ..."

    :param context: The annotation to attach

    :raises ContextError: Wrapping any OSError, ValueError or ContextError raised in the block
    """
    try:
        yield
    except _ANNOTATABLE as e:
        raise ContextError(context) from e


def option_context(description: str) -> Callable[[Callable[[_T], _R | None]], Callable[[_T], _R]]:
    """Turn a query returning ``None`` for "no value" into one that raises a descriptive error.

    The decorated method must take only ``self``, which must be path-like.

    :param description: The fixed phrase describing what was missing, e.g. "missing expected filename"

    :returns: A decorator

    :raises ContextError: From the decorated method, wrapping a MissingValueError, when the query yields None
    """

    def decorator(func: Callable[[_T], _R | None]) -> Callable[[_T], _R]:
        @wraps(func)
        def wrapper(self: _T) -> _R:
            value = func(self)
            if value is None:
                raise ContextError(processing(self)) from MissingValueError(description)  # type: ignore[arg-type]
            return value

        return wrapper

    return decorator


def path_context(func: Callable[Concatenate[_T, _S], _R]) -> Callable[Concatenate[_T, _S], _R]:
    """Wrap any native failure of a single-path method with the path being processed.

    :raises ContextError: From the decorated method, wrapping the native OSError or ValueError
    """

    @wraps(func)
    def wrapper(self: _T, *args: _S.args, **kwargs: _S.kwargs) -> _R:
        with annotate(processing(self)):  # type: ignore[arg-type]
            return func(self, *args, **kwargs)

    return wrapper


def pair_context(verb: str) -> Callable[[Callable[[_T, PathArg], _R]], Callable[[_T, PathArg], _R]]:
    """Wrap any native failure of a two-path method, naming both paths.

    >>> @pair_context("renaming")
    ... def rename_ctx(self, to): ...

    A failure is then annotated as "while renaming '/a' to '/b'".

    :param verb: The present participle describing the operation

    :returns: A decorator

    :raises ContextError: From the decorated method, wrapping the native OSError or ValueError
    """

    def decorator(func: Callable[[_T, PathArg], _R]) -> Callable[[_T, PathArg], _R]:
        @wraps(func)
        def wrapper(self: _T, other: PathArg) -> _R:
            with annotate(f"while {verb} {quote(self)} to {quote(other)}"):  # type: ignore[arg-type]
                return func(self, other)

        return wrapper

    return decorator
