from collections.abc import Iterator
import os
import sys
from typing import Protocol, runtime_checkable

if sys.version_info >= (3, 12):
    from collections.abc import Buffer
    from typing import Self
else:
    from typing_extensions import Buffer, Self


@runtime_checkable
class ContextPathLike(Protocol):
    """A protocol class for paths whose operations report failures with the path(s) involved.

    Every method is named after the primitive it wraps, with a ``_ctx`` suffix, and raises
    :py:class:`pathcontext.errors.ContextError` instead of a bare native error.
    """

    def __fspath__(self) -> str: ...

    # pure queries

    def to_str_ctx(self) -> str: ...

    def parent_ctx(self) -> Self: ...

    def file_name_ctx(self) -> str: ...

    def file_stem_ctx(self) -> str: ...

    def extension_ctx(self) -> str: ...

    def strip_prefix_ctx(self, base: str | os.PathLike[str]) -> Self: ...

    # filesystem queries

    def metadata_ctx(self) -> os.stat_result: ...

    def symlink_metadata_ctx(self) -> os.stat_result: ...

    def canonicalize_ctx(self) -> Self: ...

    def read_link_ctx(self) -> Self: ...

    def read_dir_ctx(self) -> Iterator[Self]: ...

    # filesystem mutations

    def copy_ctx(self, to: str | os.PathLike[str]) -> int: ...

    def create_dir_ctx(self) -> None: ...

    def create_dir_all_ctx(self) -> None: ...

    def hard_link_ctx(self, link: str | os.PathLike[str]) -> None: ...

    def read_ctx(self) -> bytes: ...

    def read_to_string_ctx(self) -> str: ...

    def remove_dir_ctx(self) -> None: ...

    def remove_dir_all_ctx(self) -> None: ...

    def remove_file_ctx(self) -> None: ...

    def rename_ctx(self, to: str | os.PathLike[str]) -> None: ...

    def set_readonly_ctx(self, readonly: bool) -> None: ...

    def write_ctx(self, contents: Buffer | str) -> None: ...
