"""Tests for reelcompose.engine.FFmpegEngine (uses the bundled ffmpeg)."""

import pytest

from reelcompose.engine import FFmpegEngine
from reelcompose.errors import EngineError


@pytest.fixture
def engine():
    eng = FFmpegEngine()
    yield eng
    eng.close()


class TestLifecycle:
    def test_lazy_load_once(self, engine):
        assert not engine.loaded
        engine.stage("a.bin", b"x")
        engine.list_files()
        engine.read("a.bin")
        assert engine.loaded
        assert engine.load_count == 1

    def test_close_drops_workspace(self):
        eng = FFmpegEngine()
        eng.stage("a.bin", b"x")
        eng.close()
        assert not eng.loaded
        # Reloading starts from an empty workspace.
        assert eng.list_files() == []
        eng.close()

    def test_context_manager(self):
        with FFmpegEngine() as eng:
            assert eng.loaded
        assert not eng.loaded


class TestVirtualFiles:
    def test_stage_read_delete(self, engine):
        engine.stage("in.mp4", b"payload")
        assert engine.exists("in.mp4")
        assert engine.read("in.mp4") == b"payload"
        engine.delete("in.mp4")
        assert not engine.exists("in.mp4")

    def test_delete_missing_raises(self, engine):
        with pytest.raises(FileNotFoundError):
            engine.delete("ghost.mp4")

    def test_read_missing_raises(self, engine):
        with pytest.raises(FileNotFoundError):
            engine.read("ghost.mp4")

    def test_list_files_sorted(self, engine):
        engine.stage("b", b"1")
        engine.stage("a", b"2")
        assert engine.list_files() == ["a", "b"]

    @pytest.mark.parametrize("name", ["", "..", "../escape", "dir/file", "a\\b"])
    def test_rejects_path_like_names(self, engine, name):
        with pytest.raises(ValueError, match="Invalid virtual file name"):
            engine.stage(name, b"x")


class TestExecute:
    def test_generates_output_in_workspace(self, engine):
        engine.execute([
            "-f", "lavfi", "-i", "color=c=red:s=64x64:d=1",
            "-frames:v", "1", "frame.png",
        ])
        assert engine.read("frame.png")[:4] == b"\x89PNG"

    def test_failure_raises_engine_error(self, engine):
        with pytest.raises(EngineError) as exc_info:
            engine.execute(["-i", "missing-input.mp4", "out.mp4"])
        err = exc_info.value
        assert err.returncode != 0
        assert err.instruction == ["-i", "missing-input.mp4", "out.mp4"]
        assert "missing-input.mp4" in err.stderr
