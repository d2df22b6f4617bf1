from __future__ import annotations

import tests._path_setup  # noqa: F401

import os
import stat
import tempfile
import unittest
from pathlib import Path

from tempguard import fs


class FsPrimitivesTest(unittest.TestCase):
    def test_unique_name_is_prefixed_suffixed_and_distinct(self) -> None:
        names = {fs.unique_name() for _ in range(50)}
        self.assertEqual(len(names), 50)
        for name in names:
            self.assertTrue(name.name.startswith(fs.NAME_PREFIX))
            self.assertEqual(name.suffix, ".tmp")
            self.assertEqual(name.parent, Path("."))

    def test_unique_name_accepts_explicit_suffix(self) -> None:
        self.assertEqual(fs.unique_name(".dat").suffix, ".dat")
        self.assertEqual(fs.unique_name("").suffix, "")

    def test_remove_missing_file_is_not_an_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            fs.remove(Path(td) / "missing.tmp")

    def test_is_regular_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "f.tmp"
            self.assertFalse(fs.is_regular_file(path))
            path.write_bytes(b"")
            self.assertTrue(fs.is_regular_file(path))
            self.assertFalse(fs.is_regular_file(Path(td)))

    @unittest.skipIf(os.name == "nt", "symlinks need privileges on Windows")
    def test_symlink_is_not_a_regular_file_but_exists(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            target = Path(td) / "target"
            target.write_bytes(b"x")
            link = Path(td) / "link"
            link.symlink_to(target)
            self.assertFalse(fs.is_regular_file(link))
            self.assertTrue(fs.exists(link))

    def test_open_exclusive_rw_refuses_existing_path(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "f.tmp"
            os.close(fs.open_exclusive_rw(path))
            with self.assertRaises(FileExistsError):
                fs.open_exclusive_rw(path)

    @unittest.skipIf(os.name == "nt", "POSIX permission bits")
    def test_open_exclusive_rw_is_owner_only(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "f.tmp"
            os.close(fs.open_exclusive_rw(path))
            mode = stat.S_IMODE(path.stat().st_mode)
            self.assertEqual(mode & 0o077, 0)
            self.assertTrue(mode & stat.S_IRUSR and mode & stat.S_IWUSR)

    def test_open_for_read_write_owns_descriptor(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "f.tmp"
            fd = fs.open_exclusive_rw(path)
            stream = fs.open_for_read_write(fd)
            stream.write(b"abc")
            stream.seek(0)
            self.assertEqual(stream.read(), b"abc")
            stream.close()
            with self.assertRaises(OSError):
                os.fstat(fd)

    def test_temp_directory_defaults_to_platform_tempdir(self) -> None:
        self.assertEqual(fs.temp_directory(), Path(tempfile.gettempdir()))


if __name__ == "__main__":
    unittest.main()
