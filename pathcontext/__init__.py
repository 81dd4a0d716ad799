from .errors import ContextError, MissingValueError, render_chain
from .path import ContextPath
from .protocol import ContextPathLike

__all__ = [
    "ContextError",
    "ContextPath",
    "ContextPathLike",
    "MissingValueError",
    "render_chain",
]
