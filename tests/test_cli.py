"""
Command Line Tests
==================

Argument handling and end-to-end runs of framefixer.main.
"""

import logging
import os

import numpy as np
import pytest


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    """Isolate from FRAMEFIXER_* variables and config files in the cwd."""
    for name in list(os.environ):
        if name.startswith("FRAMEFIXER_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


def _write_clip(path, seeds):
    from framefixer.stream import SinkWriteError, VideoFrameSink

    try:
        sink = VideoFrameSink(path, fourcc="MJPG", fps=30.0, size=(32, 24))
    except SinkWriteError:
        pytest.skip("OpenCV build cannot write MJPG AVI")
    with sink:
        for seed in seeds:
            rng = np.random.default_rng(seed)
            sink.write(rng.integers(0, 256, size=(24, 32, 3), dtype=np.uint8), 1)


class TestArgumentParsing:
    """Tests for build_parser and load_settings."""

    def test_long_and_legacy_spellings(self):
        from framefixer.main import build_parser, load_settings

        parser = build_parser()
        args = parser.parse_args([
            "in.mp4", "out.mp4",
            "--buffer-size", "9",
            "-duplicate_count", "3",
            "-threshold_strict", "0.8",
            "--no-progress",
        ])
        settings = load_settings(args)

        assert settings.scheduler.buffer_size == 9
        assert settings.scheduler.duplicate_count == 3
        assert settings.scheduler.relaxed_threshold == pytest.approx(0.4)
        assert settings.progress.enabled is False

    def test_non_positive_flag_uses_default(self):
        from framefixer.main import build_parser, load_settings

        args = build_parser().parse_args(["in.mp4", "out.mp4", "-buffer_size", "-3"])
        assert load_settings(args).scheduler.buffer_size == 7

    def test_logging_configured_before_option_warnings(self, monkeypatch, tmp_path):
        """Substitution warnings go out after logging uses the chosen format."""
        import framefixer.main as cli
        from framefixer.main import build_parser, load_settings

        events = []

        class EventHandler(logging.Handler):
            def emit(self, record):
                events.append(("warning", record.getMessage()))

        monkeypatch.setattr(
            cli, "setup_logging",
            lambda settings: events.append(("setup", settings.logging.format)),
        )
        config_file = tmp_path / "framefixer.yaml"
        config_file.write_text("logging:\n  format: json\n")

        handler = EventHandler(level=logging.WARNING)
        config_logger = logging.getLogger("framefixer.config")
        config_logger.addHandler(handler)
        try:
            args = build_parser().parse_args([
                "in.mp4", "out.mp4", "-c", str(config_file), "-buffer_size", "0",
            ])
            settings = load_settings(args)
        finally:
            config_logger.removeHandler(handler)

        assert events[0] == ("setup", "json")
        assert any(kind == "warning" and "buffer_size" in message for kind, message in events[1:])
        assert settings.scheduler.buffer_size == 7
        assert settings.logging.format == "json"

    def test_log_level_flag_reaches_setup(self, monkeypatch):
        import framefixer.main as cli
        from framefixer.main import build_parser, load_settings

        levels = []
        monkeypatch.setattr(cli, "setup_logging", lambda settings: levels.append(settings.logging.level))

        args = build_parser().parse_args(["in.mp4", "out.mp4", "--log-level", "DEBUG"])
        settings = load_settings(args)

        assert levels == ["DEBUG"]
        assert settings.logging.level == "DEBUG"

    def test_unparseable_flag_exits_1(self, capsys):
        from framefixer.main import main

        assert main(["in.mp4", "out.mp4", "--buffer-size", "many"]) == 1
        assert "Unable to parse arguments" in capsys.readouterr().err

    def test_missing_positional_exits_2(self):
        from framefixer.main import main

        with pytest.raises(SystemExit) as excinfo:
            main(["only-input.mp4"])
        assert excinfo.value.code == 2


class TestRun:
    """End-to-end runs."""

    def test_missing_input_exits_1(self, tmp_path):
        from framefixer.main import main

        assert main([str(tmp_path / "missing.avi"), str(tmp_path / "out.avi"), "--no-progress"]) == 1

    def test_fixes_clip(self, tmp_path):
        from framefixer.stream import VideoFrameSource
        from framefixer.main import main

        source = str(tmp_path / "in.avi")
        output = str(tmp_path / "out.avi")
        _write_clip(source, [1, 1, 2, 3, 3, 4, 4, 5])

        assert main([source, output, "--no-progress", "-buffer_size", "3"]) == 0

        with VideoFrameSource(output) as result:
            assert result.size == (32, 24)
            assert len(list(result)) == 8

    @pytest.mark.parametrize("error", ["shape", "cv2"])
    def test_stream_error_exits_1(self, tmp_path, monkeypatch, caplog, error):
        """Frame errors mid-run are logged with read/written context."""
        import cv2

        from framefixer.compare import ImageShapeError
        from framefixer.main import main
        from framefixer.schedule import FrameScheduler

        source = str(tmp_path / "in.avi")
        _write_clip(source, [1, 2, 3])

        def failing_run(self, frames, sink, cancel=None):
            if error == "shape":
                raise ImageShapeError("Comparison image shapes must match")
            raise cv2.error("resize failed")

        monkeypatch.setattr(FrameScheduler, "run", failing_run)

        with caplog.at_level(logging.ERROR, logger="framefixer.main"):
            status = main([source, str(tmp_path / "out.avi"), "--no-progress"])

        assert status == 1
        assert "(read=0, written=0), quitting..." in caplog.text
