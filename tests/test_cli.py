import json
import logging
import os

import pytest

from scaleimg import __version__, logging_config
from scaleimg.cli import EXIT_FATAL, EXIT_OK, main

from .conftest import deny_scandir


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    monkeypatch.setattr("scaleimg.cli.configure_logging", lambda level=None: None)


@pytest.fixture
def dirs(tmp_path):
    return ["--output", str(tmp_path / "out"), "--unsuitable", str(tmp_path / "bad"), "--no-progress"]


def test_scan_prints_summary(make_image, tmp_path, dirs, capsys):
    make_image("pics/a.png", (400, 400))
    make_image("pics/b.png", (140, 140))
    make_image("pics/c.png", (99, 99))

    assert main([str(tmp_path / "pics"), *dirs]) == EXIT_OK

    out = capsys.readouterr().out.splitlines()
    assert out == [
        "3 images examined",
        "1 images converted",
        "1 images already correct",
        "1 images unsuitable",
    ]


def test_defaults_to_current_directory(make_image, tmp_path, dirs, monkeypatch, capsys):
    make_image("here/a.png", (200, 200))
    monkeypatch.chdir(tmp_path / "here")

    assert main(dirs) == EXIT_OK
    assert "1 images converted" in capsys.readouterr().out


def test_per_file_errors_still_exit_zero(tmp_path, dirs, capsys):
    (tmp_path / "pics").mkdir()
    (tmp_path / "pics" / "broken.png").write_bytes(b"junk")

    assert main([str(tmp_path / "pics"), *dirs]) == EXIT_OK
    assert "1 errors" in capsys.readouterr().out


def test_half_flag(make_image, tmp_path, dirs, capsys):
    make_image("pics/a.png", (100, 200))

    assert main([str(tmp_path / "pics"), "--half", *dirs]) == EXIT_OK
    assert "1 images half suitable" in capsys.readouterr().out


@pytest.mark.parametrize(
    "flags, message",
    [
        (["--in-multiple", "0"], "in_multiple must be greater than 0"),
        (["--resize-multiple", "0"], "resize_multiple must be greater than 0"),
        (["--half", "--in-multiple", "201"], "in_multiple must be even when half is set"),
        (["--output", ""], "output_root may not be empty"),
    ],
)
def test_bad_config_is_fatal(tmp_path, flags, message, capsys):
    assert main([str(tmp_path), "--no-progress", *flags]) == EXIT_FATAL
    assert message in capsys.readouterr().err


def test_missing_path_is_fatal(tmp_path, dirs, capsys):
    assert main([str(tmp_path / "nowhere"), *dirs]) == EXIT_FATAL
    assert "unable to resolve" in capsys.readouterr().err


def test_report_written(make_image, tmp_path, dirs):
    make_image("pics/a.png", (200, 400))
    report = tmp_path / "report.json"

    assert main([str(tmp_path / "pics"), "--report", str(report), *dirs]) == EXIT_OK

    data = json.loads(report.read_text(encoding="utf-8"))
    assert data["summary"]["converted"] == 1
    assert data["files"][0]["out_width"] == 140
    assert data["files"][0]["out_height"] == 280


def test_progress_bar_does_not_touch_stdout(make_image, tmp_path, capsys):
    make_image("pics/a.png", (200, 200))

    code = main([str(tmp_path / "pics"), "--output", str(tmp_path / "out"), "--unsuitable", str(tmp_path / "bad")])

    assert code == EXIT_OK
    assert capsys.readouterr().out.splitlines() == ["1 images examined", "1 images converted"]


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_configure_logging_sets_root_level(monkeypatch):
    root = logging.getLogger()
    saved = (root.level, root.handlers[:])
    monkeypatch.setattr(logging_config, "_CONFIGURED", False)
    try:
        logging_config.configure_logging("debug")
        assert root.level == logging.DEBUG
        # Second call is a no-op.
        logging_config.configure_logging("error")
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(saved[0])
        root.handlers[:] = saved[1]


def test_log_level_from_environment(monkeypatch):
    root = logging.getLogger()
    saved = (root.level, root.handlers[:])
    monkeypatch.setattr(logging_config, "_CONFIGURED", False)
    monkeypatch.setenv("SCALEIMG_LOG_LEVEL", "info")
    try:
        logging_config.configure_logging()
        assert root.level == logging.INFO
    finally:
        root.setLevel(saved[0])
        root.handlers[:] = saved[1]


def test_walk_failure_is_fatal(make_image, tmp_path, dirs, monkeypatch, capsys):
    make_image("pics/locked/a.png", (200, 200))
    monkeypatch.setattr(os, "scandir", deny_scandir("locked"))

    assert main([str(tmp_path / "pics"), *dirs]) == EXIT_FATAL
    assert "unable to scan" in capsys.readouterr().err
    assert not (tmp_path / "out").exists()


def test_underscore_flag_spellings(make_image, tmp_path, dirs, capsys):
    make_image("pics/a.png", (100, 100))

    code = main([str(tmp_path / "pics"), "--in_multiple", "100", "--resize_multiple", "50", *dirs])

    assert code == EXIT_OK
    assert "1 images converted" in capsys.readouterr().out
