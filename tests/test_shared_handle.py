"""Tests for tempguard.shared."""

from __future__ import annotations

import copy
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import patch

import pytest

from tempguard import EmptyHandle, SharedHandle, UniqueHandle, fs


@pytest.fixture
def shared(tmp_path: Path) -> SharedHandle:
    handle = SharedHandle(tmp_path)
    handle.secure_create_file()
    return handle


class TestSharedOwnership:
    def test_file_survives_until_last_owner_is_dropped(self, tmp_path: Path):
        s1 = SharedHandle(tmp_path)
        s1.secure_create_file()
        s2 = s1.share()
        p = s1.path
        assert s2.path == p
        assert s1.use_count == 2

        del s1
        assert p.exists()
        assert s2.use_count == 1

        del s2
        assert not p.exists()

    def test_copy_makes_another_owner(self, shared: SharedHandle):
        other = copy.copy(shared)
        assert other.use_count == 2
        shared.release()
        assert other.path.exists()
        other.release()

    def test_deepcopy_is_refused(self, shared: SharedHandle):
        with pytest.raises(TypeError):
            copy.deepcopy(shared)

    def test_release_is_idempotent_and_empties_owner(self, shared: SharedHandle):
        p = shared.path
        shared.release()
        shared.release()
        assert shared.is_empty()
        assert shared.use_count == 0
        assert not p.exists()

    def test_released_owner_refuses_operations(self, shared: SharedHandle):
        shared.release()
        with pytest.raises(EmptyHandle):
            shared.secure_create_fd()
        with pytest.raises(EmptyHandle):
            shared.share()
        assert shared.disconnect() is None

    def test_with_block_releases_owner(self, tmp_path: Path):
        with SharedHandle(tmp_path) as s:
            s.secure_create_file()
            p = s.path
        assert not p.exists()

    def test_disconnect_disarms_every_owner(self, shared: SharedHandle):
        s2 = shared.share()
        p = s2.disconnect()
        assert shared.is_empty()
        assert s2.is_empty()
        del shared, s2
        assert p.exists()
        p.unlink()

    def test_from_unique_takes_over_deletion(self, tmp_path: Path):
        u = UniqueHandle(tmp_path)
        u.secure_create_file()
        p = u.path

        s = SharedHandle.from_unique(u)
        assert u.is_empty()
        assert s.path == p

        del u
        assert p.exists()
        s.release()
        assert not p.exists()

    def test_path_argument_like_unique_handle(self, tmp_path: Path):
        target = tmp_path / "given.tmp"
        s = SharedHandle(target)
        assert s.path == target
        default = SharedHandle()
        assert default.path.suffix == ".tmp"

    def test_end_to_end_through_stream(self, tmp_path: Path):
        s = SharedHandle(tmp_path)
        with s.secure_create_stream() as stream:
            stream.write(b"abc")
        p = s.path
        assert p.read_bytes() == b"abc"
        s.release()
        assert not p.exists()

    def test_concurrent_release_deletes_exactly_once(self, shared: SharedHandle):
        owners = [shared] + [shared.share() for _ in range(7)]
        p = shared.path
        with patch("tempguard.fs.remove", wraps=fs.remove) as spy:
            with ThreadPoolExecutor(max_workers=8) as ex:
                list(ex.map(lambda o: o.release(), owners))
        assert spy.call_count == 1
        assert not p.exists()

    def test_last_release_swallows_delete_failure(self, shared: SharedHandle, caplog):
        p = shared.path
        with patch("tempguard.fs.remove", side_effect=PermissionError(13, "Permission denied")):
            with caplog.at_level(logging.WARNING, logger="tempguard"):
                shared.release()
        assert "Permission denied" in caplog.text
        assert p.exists()
        p.unlink()


class TestSharedOrdering:
    def test_compares_pointed_to_path(self, tmp_path: Path):
        a = SharedHandle(tmp_path / "a.tmp")
        b = SharedHandle(tmp_path / "b.tmp")
        assert a < b
        assert a == a.share()
        assert a != b

    def test_empty_owners_are_equal_and_sort_first(self, tmp_path: Path):
        e1 = SharedHandle(tmp_path)
        e2 = SharedHandle(tmp_path)
        e1.release()
        e2.disconnect()
        armed = SharedHandle(tmp_path)
        assert e1 == e2
        assert e1 < armed
        assert sorted([armed, e2]) == [e2, armed]

    def test_order_is_shared_with_unique_handles(self, tmp_path: Path):
        u = UniqueHandle(tmp_path / "same.tmp")
        s = SharedHandle(tmp_path / "same.tmp")
        assert u == s
        u.disconnect()
        assert u < s
