from collections.abc import Iterator


class MissingValueError(LookupError):
    """Raised when a path query that may legitimately yield nothing does yield nothing.

    >>> MissingValueError("missing expected extension")
    MissingValueError('missing expected extension')
    """


class ContextError(Exception):
    """A single human-readable annotation wrapping an underlying error.

    The wrapped error is stored as ``__cause__``, so chains are built with ordinary
    exception chaining:

    >>> try:
    ...     raise ContextError("while processing path '/foo'") from FileNotFoundError(2, "No such file")
    ... except ContextError as e:
    ...     str(e)
    "while processing path '/foo': [Errno 2] No such file"

    :param context: The annotation for this layer
    """

    def __init__(self, context: str) -> None:
        super().__init__(context)
        self.context = context

    def __str__(self) -> str:
        """Render the whole chain, outermost annotation first, ending with the root cause.

        :returns: The links of the chain joined by ": "
        """
        return render_chain(self)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.context!r})"

    @property
    def chain(self) -> tuple[str, ...]:
        """Return each link of the chain as a string, outermost first.

        :returns: A tuple of the annotations followed by the root cause message
        """
        return tuple(_links(self))

    @property
    def root_cause(self) -> BaseException:
        """Return the innermost error of the chain.

        If this annotation wraps nothing, the annotation itself is the root cause.

        :returns: The innermost exception
        """
        exc: BaseException = self
        while exc.__cause__ is not None:
            exc = exc.__cause__
        return exc


def _links(exc: BaseException) -> Iterator[str]:
    current: BaseException | None = exc
    while current is not None:
        # ContextError.__str__ renders the rest of the chain, so only take its own annotation
        yield current.context if isinstance(current, ContextError) else str(current)
        current = current.__cause__


def render_chain(exc: BaseException, sep: str = ": ") -> str:
    """Render an exception and everything it was raised from, outermost first.

    Only explicit chaining (``raise ... from ...``) is followed; implicit ``__context__`` is ignored.

    >>> render_chain(ContextError("with prefix '/bananas'"))
    "with prefix '/bananas'"

    :param exc: The outermost exception
    :param sep: The delimiter placed between links

    :returns: The rendered chain, without a trailing newline
    """
    return sep.join(_links(exc))
