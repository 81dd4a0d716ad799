from collections.abc import Iterator
from contextlib import contextmanager
from functools import total_ordering
import os
import pathlib
import shutil
import stat
import sys
import tempfile

if sys.version_info >= (3, 12):
    from collections.abc import Buffer
    from typing import Self
else:
    from typing_extensions import Buffer, Self

from .wrappers import annotate, option_context, pair_context, path_context, PathArg, processing, quote

_WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH


def _split_file_at_dot(name: str) -> tuple[str, str | None]:
    """Split a final path segment into (stem, extension) at its last dot.

    >>> _split_file_at_dot("baz.tar.gz")
    ('baz.tar', 'gz')
    >>> _split_file_at_dot(".bashrc")
    ('.bashrc', None)
    >>> _split_file_at_dot("baz.")
    ('baz', '')

    :param name: The final segment of a path, which must not be empty
    :returns: The stem and the extension (without the dot), or None if there is no extension
    """
    if name == "..":
        return name, None

    stem, dot, extension = name.rpartition(".")
    if not dot or not stem:
        # no dot at all, or a dotfile like ".bashrc" whose only dot is the leading one
        return name, None

    return stem, extension


@total_ordering
class ContextPath:
    """A filesystem path whose ``*_ctx`` operations raise :py:class:`ContextError` naming the path(s) involved.

    >>> ContextPath("/this/path/should/not/exist").read_ctx()
    Traceback (most recent call last):
    ...
    pathcontext.errors.ContextError: while processing path '/this/path/should/not/exist': [Errno 2] ...

    The wrapped ``pathlib.Path`` is never mutated; every operation derives a new value or acts on the filesystem.
    """

    def __init__(self, *segments: PathArg) -> None:
        self._path = pathlib.Path(*segments)

    @classmethod
    def _from_pathlib_path(cls, path: pathlib.Path) -> Self:
        """Return an instance of this class from a pathlib.Path instance, avoiding the initialization overhead.

        This should only be used internally.

        :param path: The pathlib.Path instance to use
        :returns: An instance of this class wrapping the given path
        """
        inst = cls.__new__(cls)
        inst._path = path
        return inst

    @classmethod
    def cwd(cls) -> Self:
        """Return a new path object for the current working directory."""
        return cls._from_pathlib_path(pathlib.Path.cwd())

    def as_pathlib(self) -> pathlib.Path:
        """Return the underlying pathlib.Path."""
        return self._path

    def __fspath__(self) -> str:
        return self._path.__fspath__()

    def __str__(self) -> str:
        return str(self._path)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({str(self._path)!r})"

    def __eq__(self, other: object) -> bool:
        """Return whether this path is equal to another path.

        Comparison is purely lexical, as for pathlib.Path.

        :param other: The path to compare to
        :returns: True if the paths are equal, False otherwise
        """
        if isinstance(other, type(self)):
            return self._path == other._path

        if isinstance(other, pathlib.PurePath):
            return self._path == other

        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if isinstance(other, type(self)):
            return self._path < other._path

        if isinstance(other, pathlib.PurePath):
            return self._path < other

        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._path)

    def __truediv__(self, other: PathArg) -> Self:
        """Return a new path by joining the given path with this path.

        >>> ContextPath("/foo/bar") / "baz.txt"
        ContextPath('/foo/bar/baz.txt')

        :param other: The path to join with this path
        :returns: A new path object, joined with the given path
        """
        if not isinstance(other, (str, os.PathLike)):
            return NotImplemented

        return type(self)._from_pathlib_path(self._path / other)

    def join_path(self, *other: PathArg) -> Self:
        """Return a new path by joining the given segments with this path.

        >>> ContextPath("/foo").join_path("bar", "baz.txt")
        ContextPath('/foo/bar/baz.txt')

        :param other: The segments to join, in order
        :returns: A new path object, joined with all of the given segments
        """
        return type(self)._from_pathlib_path(self._path.joinpath(*other))

    @classmethod
    @contextmanager
    def temporary_file(
        cls,
        *,
        suffix: str | None = None,
        prefix: str | None = None,
        parent: PathArg | None = None,
        delete: bool = True,
    ) -> Iterator[Self]:
        """Return a path pointing to a new, empty temporary file. This should be used within a `with` block.
        Unless `delete=False`, the temporary file is removed when the context manager exits.

        >>> with ContextPath.temporary_file() as p:
        ...     p.write_ctx(b"Hello, world!")
        ...     assert p.read_ctx() == b"Hello, world!"

        :param suffix: If provided, the suffix to use for the temporary file
        :param prefix: If provided, the prefix to use for the temporary file
        :param parent: If provided, the parent directory to use for the temporary file
        :param delete: Whether to delete the temporary file when the context manager exits (default: True)

        :yields: A new path object pointing to the temporary file
        """
        # close the handle straight away so reads and writes through the path are unimpeded
        f, abspath = tempfile.mkstemp(suffix=suffix, prefix=prefix, dir=parent)
        os.close(f)

        p = cls(abspath)

        try:
            yield p
        finally:
            if delete:
                with annotate(processing(p)):
                    pathlib.Path(abspath).unlink(missing_ok=True)

    @classmethod
    @contextmanager
    def temporary_directory(
        cls,
        *,
        suffix: str | None = None,
        prefix: str | None = None,
        parent: PathArg | None = None,
        delete: bool = True,
    ) -> Iterator[Self]:
        """Return a path pointing to a new, empty temporary directory. This should be used within a `with` block.
        Unless `delete=False`, the directory and everything in it is removed, best-effort, when the context manager
        exits.

        >>> with ContextPath.temporary_directory() as d:
        ...     (d / "foo.txt").write_ctx("Hello, world!")

        :param suffix: If provided, the suffix to use for the temporary directory
        :param prefix: If provided, the prefix to use for the temporary directory
        :param parent: If provided, the parent directory to use for the temporary directory
        :param delete: Whether to delete the temporary directory when the context manager exits (default: True)

        :yields: A new path object pointing to the temporary directory
        """
        temp_dir = cls(tempfile.mkdtemp(suffix=suffix, prefix=prefix, dir=parent))

        try:
            yield temp_dir
        finally:
            if delete:
                shutil.rmtree(temp_dir, ignore_errors=True)

    # ---- pure queries ----

    def _file_name(self) -> str | None:
        name = self._path.name
        if name in ("", ".."):
            return None
        return name

    @option_context("invalid UTF8")
    def to_str_ctx(self) -> str | None:
        """Return the path as a string, which must be valid UTF-8.

        Paths decoded from undecodable bytes (e.g., via ``os.fsdecode(b"\\x81\\xff")``) carry lone surrogates
        and are rejected.

        :returns: The string form of the path

        :raises ContextError: If the path is not valid UTF-8
        """
        text = str(self._path)
        try:
            text.encode("utf-8")
        except UnicodeEncodeError:
            return None
        return text

    @option_context("expected parent directory")
    def parent_ctx(self) -> Self | None:
        """Return the path with its final segment removed.

        >>> ContextPath("/foo/bar.txt").parent_ctx()
        ContextPath('/foo')

        :returns: The parent path

        :raises ContextError: If the path is a bare root (e.g. "/") or empty, and so has no parent
        """
        parent = self._path.parent
        if parent == self._path:
            return None
        return type(self)._from_pathlib_path(parent)

    @option_context("missing expected filename")
    def file_name_ctx(self) -> str | None:
        """Return the final segment of the path.

        >>> ContextPath("/foo/bar.txt").file_name_ctx()
        'bar.txt'

        :returns: The final segment

        :raises ContextError: If the path has no final segment, i.e. is a root or ends in ".."
        """
        return self._file_name()

    @option_context("missing expected filename")
    def file_stem_ctx(self) -> str | None:
        """Return the final segment of the path without its extension.

        >>> ContextPath("/foo/bar.txt").file_stem_ctx()
        'bar'

        A name with no extension is its own stem:
        >>> ContextPath("/foo/bar").file_stem_ctx()
        'bar'

        :returns: The stem of the final segment

        :raises ContextError: If the path has no final segment
        """
        name = self._file_name()
        if name is None:
            return None
        return _split_file_at_dot(name)[0]

    @option_context("missing expected extension")
    def extension_ctx(self) -> str | None:
        """Return the extension of the final segment, without the leading dot.

        >>> ContextPath("/foo/bar.txt").extension_ctx()
        'txt'

        :returns: The extension

        :raises ContextError: If there is no final segment, it has no dot, or it is a bare dotfile like ".bar"
        """
        name = self._file_name()
        if name is None:
            return None
        return _split_file_at_dot(name)[1]

    def strip_prefix_ctx(self, base: PathArg) -> Self:
        """Return the path relative to `base`. This is purely lexical and does not access the filesystem.

        >>> ContextPath("/foo/bar/quz.txt").strip_prefix_ctx("/foo")
        ContextPath('bar/quz.txt')

        :param base: The leading path to remove
        :returns: The remainder of the path after `base`

        :raises ContextError: If `base` is not a prefix of the path
        """
        with annotate(processing(self)), annotate(f"with prefix {quote(base)}"):
            return type(self)._from_pathlib_path(self._path.relative_to(base))

    # ---- filesystem queries ----

    @path_context
    def metadata_ctx(self) -> os.stat_result:
        """Return the metadata of the path, following symlinks. The result is looked up at each call.

        :raises ContextError: If the path cannot be accessed
        """
        return os.stat(self)

    @path_context
    def symlink_metadata_ctx(self) -> os.stat_result:
        """Return the metadata of the path itself, without following a final symlink.

        :raises ContextError: If the path cannot be accessed
        """
        return os.lstat(self)

    @path_context
    def canonicalize_ctx(self) -> Self:
        """Return the absolute path with every symlink, "." and ".." resolved. The path must exist.

        >>> ContextPath("/..").canonicalize_ctx()
        ContextPath('/')

        :raises ContextError: If the path does not exist or a symlink loop is encountered
        """
        return type(self)._from_pathlib_path(self._path.resolve(strict=True))

    @path_context
    def read_link_ctx(self) -> Self:
        """Return the target of a symbolic link, as stored in the link.

        :raises ContextError: If the path does not exist or is not a symbolic link
        """
        return type(self)(os.readlink(self))

    @path_context
    def read_dir_ctx(self) -> Iterator[Self]:
        """Return an iterator over the direct children of the directory, in arbitrary order.

        The directory is listed when this is called, so failures are raised here rather than during iteration.

        :raises ContextError: If the path does not exist, is not a directory, or cannot be listed
        """
        with os.scandir(self) as entries:
            children = [type(self)(entry.path) for entry in entries]

        return iter(children)

    # ---- filesystem mutations ----

    @pair_context("copying")
    def copy_ctx(self, to: PathArg) -> int:
        """Copy the contents and permission bits of this file to `to`, overwriting it if it exists.

        :param to: The destination file path
        :returns: The number of bytes copied

        :raises ContextError: If either path cannot be accessed, naming both paths
        """
        shutil.copyfile(self, to)
        shutil.copymode(self, to)
        return os.stat(to).st_size

    @path_context
    def create_dir_ctx(self) -> None:
        """Create this directory. Its parent must exist.

        :raises ContextError: If the directory exists, its parent doesn't, or it cannot be created
        """
        os.mkdir(self)

    @path_context
    def create_dir_all_ctx(self) -> None:
        """Create this directory and any missing parents. An existing directory is not an error.

        :raises ContextError: If any directory cannot be created, or a file is in the way
        """
        os.makedirs(self, exist_ok=True)

    @pair_context("hard-linking")
    def hard_link_ctx(self, link: PathArg) -> None:
        """Create a hard link at `link` pointing to this path.

        :param link: The path of the new link
        :raises ContextError: If the link cannot be created, naming both paths
        """
        os.link(self, link)

    @path_context
    def read_ctx(self) -> bytes:
        """Read the entire contents of the file as bytes.

        :raises ContextError: If the file cannot be read
        """
        return self._path.read_bytes()

    @path_context
    def read_to_string_ctx(self) -> str:
        """Read the entire contents of the file, which must be valid UTF-8. Newlines are not translated.

        :raises ContextError: If the file cannot be read or is not valid UTF-8
        """
        return self._path.read_bytes().decode("utf-8")

    @path_context
    def remove_dir_ctx(self) -> None:
        """Remove this directory, which must be empty.

        :raises ContextError: If the directory does not exist, is not empty, or cannot be removed
        """
        os.rmdir(self)

    @path_context
    def remove_dir_all_ctx(self) -> None:
        """Remove this directory and everything beneath it.

        :raises ContextError: If anything in the tree cannot be removed; the first failure stops the removal
        """
        shutil.rmtree(self)

    @path_context
    def remove_file_ctx(self) -> None:
        """Remove this file (or symbolic link).

        :raises ContextError: If the file does not exist or cannot be removed
        """
        os.remove(self)

    @pair_context("renaming")
    def rename_ctx(self, to: PathArg) -> None:
        """Rename this path to `to`, replacing `to` if it exists and the platform allows it.

        :param to: The new path
        :raises ContextError: If the rename fails, naming both paths
        """
        os.replace(self, to)

    def set_readonly_ctx(self, readonly: bool) -> None:
        """Make this path read-only (clearing every write bit) or writable by its owner.

        The current permissions are fetched, modified, then written back.

        :param readonly: Whether the path should be read-only

        :raises ContextError: If the metadata cannot be fetched or the permissions cannot be set
        """
        mode = stat.S_IMODE(self.metadata_ctx().st_mode)
        mode = mode & ~_WRITE_BITS if readonly else mode | stat.S_IWUSR

        with annotate(processing(self)), annotate(f"with readonly permission {readonly!r}"):
            os.chmod(self, mode)

    @path_context
    def write_ctx(self, contents: Buffer | str) -> None:
        """Write `contents` to the file, creating it if needed and truncating it otherwise.

        >>> ContextPath("/path/to/file").write_ctx("Hello world!")
        >>> ContextPath("/path/to/file").read_ctx()
        b'Hello world!'

        :param contents: The bytes to write; a str is encoded as UTF-8
        :raises ContextError: If the file cannot be written
        """
        data = contents.encode("utf-8") if isinstance(contents, str) else contents
        with open(self, mode="wb") as f:
            f.write(data)
