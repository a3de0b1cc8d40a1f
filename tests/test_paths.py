import pytest

from mailproof import paths as paths_module
from mailproof.paths import allocate_run_dir


class TestAllocateRunDir:
    def test_creates_fresh_directory(self, tmp_path):
        allocated = allocate_run_dir(tmp_path, 42)
        assert allocated.root.is_dir()
        assert allocated.root.parent == tmp_path.resolve()
        assert allocated.root.name.startswith("email-42-")

    def test_file_names(self, tmp_path):
        allocated = allocate_run_dir(tmp_path, "abc")
        assert allocated.desktop == allocated.root / "desktop.png"
        assert allocated.mobile == allocated.root / "mobile.png"
        assert allocated.link(3) == allocated.root / "link-3.png"
        assert allocated.desktop.is_absolute()

    def test_run_id_is_slugified(self, tmp_path):
        allocated = allocate_run_dir(tmp_path, "Spring Sale / v2")
        assert allocated.root.name.startswith("email-spring-sale-v2-")

    def test_same_millisecond_does_not_collide(self, tmp_path, monkeypatch):
        monkeypatch.setattr(paths_module, "_now_ms", lambda: 1700000000000)
        first = allocate_run_dir(tmp_path, 7)
        second = allocate_run_dir(tmp_path, 7)
        assert first.root != second.root
        assert second.root.name == first.root.name + "-1"

    def test_creates_missing_output_root(self, tmp_path):
        allocated = allocate_run_dir(tmp_path / "nested" / "out", 1)
        assert allocated.root.is_dir()

    def test_unwritable_root_raises(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(OSError):
            allocate_run_dir(blocker, 1)

    def test_last_collision_suffix_is_tried(self, tmp_path, monkeypatch):
        monkeypatch.setattr(paths_module, "_now_ms", lambda: 1700000000000)
        monkeypatch.setattr(paths_module, "MAX_COLLISION_SUFFIX", 2)
        stem = "email-7-1700000000000"
        for name in (stem, f"{stem}-1"):
            (tmp_path / name).mkdir()

        allocated = allocate_run_dir(tmp_path, 7)
        assert allocated.root.name == f"{stem}-2"

        with pytest.raises(FileExistsError):
            allocate_run_dir(tmp_path, 7)
