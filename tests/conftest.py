from collections.abc import Iterator
import os
import pathlib
import stat

import pytest

from pathcontext import ContextPath


@pytest.fixture(scope="function")
def mock_fs(tmp_path: pathlib.Path) -> Iterator[ContextPath]:
    root = tmp_path / "root"
    root.mkdir()

    (root / "a").mkdir()
    (root / "a" / "b").mkdir()
    (root / "a" / "b" / "file.txt").write_text("contents of b/file.txt")

    (root / "a" / "c").mkdir()
    (root / "a" / "c" / "file.txt").write_text("contents of c/file.txt")
    (root / "a" / "c" / "file2.log").write_text("contents of c/file2.log")

    (root / ".hidden-file").write_text("contents of .hidden-file")
    (root / "not-utf8.txt").write_bytes(b"not utf8: \xf3")

    os.symlink(root / "a" / "b" / "file.txt", root / "symlink-to-file")
    os.symlink(root / "nonexistent-target", root / "broken-symlink")

    yield ContextPath(root)

    # anything made read-only by a test must be writable again for tmp_path cleanup
    for dirpath, dirnames, _ in os.walk(root):
        for name in dirnames:
            path = os.path.join(dirpath, name)
            if not os.path.islink(path):
                os.chmod(path, os.stat(path).st_mode | stat.S_IWUSR)
    os.chmod(root, os.stat(root).st_mode | stat.S_IWUSR)
