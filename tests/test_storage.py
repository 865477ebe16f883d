"""Tests for media folder storage."""

from pathlib import Path
from unittest.mock import patch

import pytest

from mediastore.storage import folder
from mediastore.storage.folder import (
    MediaRemovalError,
    add_data_to_folder_uniquely,
    add_hash_suffix_to_file_stem,
    data_for_file,
    remove_files,
)
from mediastore.utils.files import sha1_of_data


def _listing(folder: Path) -> list[str]:
    return sorted(p.name for p in folder.iterdir())


class TestHashSuffix:
    """Test add_hash_suffix_to_file_stem."""

    def test_suffix_before_extension(self):
        hash_ = sha1_of_data(b"hello")
        assert (
            add_hash_suffix_to_file_stem("test.jpg", hash_)
            == "test-aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d.jpg"
        )

    def test_no_extension(self):
        hash_ = sha1_of_data(b"hello")
        assert (
            add_hash_suffix_to_file_stem("README", hash_)
            == "README-aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d"
        )

    def test_long_name_trimmed_to_hash_budget(self):
        """Long names keep 99 bytes of stem and extension before the suffix."""
        name = "x" * 116 + ".jpg"
        result = add_hash_suffix_to_file_stem(name, sha1_of_data(b"hello"))

        # 120 - 20 - 1 bytes, less ".jpg"
        assert result == "x" * 95 + "-aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d.jpg"
        assert len(result.encode("utf-8")) == 140

    def test_long_extension_trimmed(self):
        result = add_hash_suffix_to_file_stem("a." + "b" * 20, sha1_of_data(b"hello"))

        assert result == "a-aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d." + "b" * 10


class TestAddDataToFolderUniquely:
    """Test the unique-name writer."""

    def test_adding(self, tmp_path):
        """Covers the new, same-content and different-content cases."""
        h1 = sha1_of_data(b"hello")
        assert add_data_to_folder_uniquely(tmp_path, "test.mp3", b"hello", h1) == "test.mp3"

        # same contents
        assert add_data_to_folder_uniquely(tmp_path, "test.mp3", b"hello", h1) == "test.mp3"
        assert _listing(tmp_path) == ["test.mp3"]

        # different contents
        h2 = sha1_of_data(b"hello1")
        assert (
            add_data_to_folder_uniquely(tmp_path, "test.mp3", b"hello1", h2)
            == "test-88fdd585121a4ccb3d1540527aee53a77c77abb8.mp3"
        )

        assert _listing(tmp_path) == [
            "test-88fdd585121a4ccb3d1540527aee53a77c77abb8.mp3",
            "test.mp3",
        ]
        assert (tmp_path / "test.mp3").read_bytes() == b"hello"
        assert (
            tmp_path / "test-88fdd585121a4ccb3d1540527aee53a77c77abb8.mp3"
        ).read_bytes() == b"hello1"

    def test_same_content_is_not_rewritten(self, tmp_path):
        """Re-adding identical content should leave the file alone."""
        target = tmp_path / "a.jpg"
        target.write_bytes(b"hello")
        before = target.stat().st_mtime_ns

        with patch.object(Path, "write_bytes") as mock_write:
            name = add_data_to_folder_uniquely(tmp_path, "a.jpg", b"hello", sha1_of_data(b"hello"))

        assert name == "a.jpg"
        mock_write.assert_not_called()
        assert target.stat().st_mtime_ns == before

    def test_repeated_collision_is_stable(self, tmp_path):
        """Adding the colliding content again should reuse the suffixed name."""
        add_data_to_folder_uniquely(tmp_path, "a.jpg", b"one", sha1_of_data(b"one"))
        first = add_data_to_folder_uniquely(tmp_path, "a.jpg", b"two", sha1_of_data(b"two"))
        second = add_data_to_folder_uniquely(tmp_path, "a.jpg", b"two", sha1_of_data(b"two"))

        assert first == second
        assert len(_listing(tmp_path)) == 2

    def test_normalizes_desired_name(self, tmp_path):
        """Should store under the normalized name."""
        name = add_data_to_folder_uniquely(
            tmp_path, "con.jpg?", b"data", sha1_of_data(b"data")
        )

        assert name == "con_.jpg"
        assert _listing(tmp_path) == ["con_.jpg"]

    def test_trusts_supplied_digest(self, tmp_path):
        """A matching caller digest counts as same content."""
        (tmp_path / "a.jpg").write_bytes(b"old")

        name = add_data_to_folder_uniquely(tmp_path, "a.jpg", b"new", sha1_of_data(b"old"))

        assert name == "a.jpg"
        assert (tmp_path / "a.jpg").read_bytes() == b"old"

    def test_lookup_error_propagates(self, tmp_path):
        """Errors other than absence should surface."""
        (tmp_path / "a.jpg").mkdir()

        with pytest.raises(OSError):
            add_data_to_folder_uniquely(tmp_path, "a.jpg", b"x", sha1_of_data(b"x"))

    def test_missing_folder_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            add_data_to_folder_uniquely(tmp_path / "nope", "a.jpg", b"x", sha1_of_data(b"x"))


class TestRemoveFiles:
    """Test remove_files."""

    def test_empty_is_noop(self, tmp_path):
        """No trash call should happen for an empty list."""
        with patch("mediastore.storage.folder.send2trash") as mock_trash:
            remove_files(tmp_path, [])

        mock_trash.assert_not_called()

    def test_single_batch_call(self, tmp_path):
        """All files should be trashed in one call."""
        with patch("mediastore.storage.folder.send2trash") as mock_trash:
            remove_files(tmp_path, ["a.jpg", "b.mp3"])

        mock_trash.assert_called_once_with(
            [str(tmp_path / "a.jpg"), str(tmp_path / "b.mp3")]
        )

    def test_failure_is_wrapped(self, tmp_path):
        """Underlying failures should surface as a single batch error."""
        cause = FileNotFoundError("missing")
        with patch("mediastore.storage.folder.send2trash", side_effect=cause):
            with pytest.raises(MediaRemovalError) as excinfo:
                remove_files(tmp_path, ["a.jpg", "b.jpg"])

        assert "removing files failed" in str(excinfo.value)
        assert excinfo.value.__cause__ is cause

    def test_moves_file_to_trash(self, tmp_path, monkeypatch):
        """Files should leave the folder and land in the trash."""
        plat_other = pytest.importorskip("send2trash.plat_other")
        if folder.send2trash is not plat_other.send2trash:
            pytest.skip("platform trash backend")

        home = tmp_path / "home"
        data_home = home / ".local" / "share"
        data_home.mkdir(parents=True)
        monkeypatch.setenv("HOME", str(home))
        monkeypatch.setattr(plat_other, "XDG_DATA_HOME", bytes(data_home))
        monkeypatch.setattr(plat_other, "HOMETRASH_B", bytes(data_home / "Trash"))
        monkeypatch.setattr(plat_other, "HOMETRASH", str(data_home / "Trash"))

        media = tmp_path / "media"
        media.mkdir()
        (media / "a.jpg").write_bytes(b"hello")
        (media / "keep.jpg").write_bytes(b"keep")

        remove_files(media, ["a.jpg"])

        assert _listing(media) == ["keep.jpg"]
        assert (data_home / "Trash" / "files" / "a.jpg").read_bytes() == b"hello"

    def test_missing_file_raises_batch_error(self, tmp_path):
        with pytest.raises(MediaRemovalError):
            remove_files(tmp_path, ["missing.jpg"])


class TestDataForFile:
    """Test data_for_file."""

    def test_reads_contents(self, tmp_path):
        (tmp_path / "a.jpg").write_bytes(b"\x00\x01binary")

        assert data_for_file(tmp_path, "a.jpg") == b"\x00\x01binary"

    def test_missing_returns_none(self, tmp_path):
        assert data_for_file(tmp_path, "missing.jpg") is None

    def test_other_errors_propagate(self, tmp_path):
        (tmp_path / "dir.jpg").mkdir()

        with pytest.raises(OSError):
            data_for_file(tmp_path, "dir.jpg")
