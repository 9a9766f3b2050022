from __future__ import annotations

import pytest
from typer.testing import CliRunner

from passentry.cli.main import app

runner = CliRunner()

HOTP_RECORD = "hunter2\nlogin: alice\notpauth://hotp/Example?secret=ABC123&counter=5\n"


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[general]\nlog_level = "WARNING"\n')
    return path


@pytest.fixture
def record(tmp_path):
    path = tmp_path / "example.txt"
    path.write_text(HOTP_RECORD, encoding="utf-8")
    return path


def invoke(config_path, *args, **kwargs):
    return runner.invoke(app, ["--config", str(config_path), *args], **kwargs)


def test_version(config_path):
    result = invoke(config_path, "version")

    assert result.exit_code == 0
    assert "Version" in result.output


def test_show_masks_secrets(config_path, record):
    result = invoke(config_path, "show", str(record))

    assert result.exit_code == 0
    assert "alice" in result.output
    assert "hunter2" not in result.output
    assert "ABC123" not in result.output


def test_show_reveal(config_path, record):
    result = invoke(config_path, "show", str(record), "--reveal")

    assert result.exit_code == 0
    assert "hunter2" in result.output
    assert "ABC123" in result.output


def test_show_corrupt_record(config_path, tmp_path):
    path = tmp_path / "bad.txt"
    path.write_text("pw\notpauth://hotp/x?secret=A&counter=notanumber\n")

    result = invoke(config_path, "show", str(path))

    assert result.exit_code == 1


def test_show_missing_file(config_path, tmp_path):
    result = invoke(config_path, "show", str(tmp_path / "nope.txt"))

    assert result.exit_code == 1


def test_increment_to_stdout(config_path, record):
    result = invoke(config_path, "increment-hotp", str(record))

    assert result.exit_code == 0
    assert result.output == HOTP_RECORD.replace("counter=5", "counter=6")
    assert record.read_text() == HOTP_RECORD


def test_increment_from_stdin(config_path):
    result = invoke(config_path, "increment-hotp", "-", input=HOTP_RECORD)

    assert result.exit_code == 0
    assert "counter=6" in result.output


def test_increment_in_place(config_path, record):
    result = invoke(config_path, "increment-hotp", str(record), "--in-place")

    assert result.exit_code == 0
    assert record.read_text() == HOTP_RECORD.replace("counter=5", "counter=6")


def test_increment_to_output_file(config_path, record, tmp_path):
    output = tmp_path / "out.txt"

    result = invoke(config_path, "increment-hotp", str(record), "-o", str(output))

    assert result.exit_code == 0
    assert output.read_text() == HOTP_RECORD.replace("counter=5", "counter=6")


def test_increment_without_hotp(config_path, tmp_path):
    path = tmp_path / "plain.txt"
    path.write_text("pw\nlogin: bob\n")

    result = invoke(config_path, "increment-hotp", str(path), "--in-place")

    assert result.exit_code == 1
    assert path.read_text() == "pw\nlogin: bob\n"


def test_in_place_rejects_stdin(config_path):
    result = invoke(config_path, "increment-hotp", "-", "--in-place", input=HOTP_RECORD)

    assert result.exit_code == 2


def test_config_show(config_path):
    result = invoke(config_path, "config", "--show")

    assert result.exit_code == 0
    assert "WARNING" in result.output
    assert "utf-8" in result.output


def test_config_init(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[general]\nlog_level = "ERROR"\n')

    result = runner.invoke(app, ["--config", str(path), "config", "--init"], input="y\n")

    assert result.exit_code == 0
    assert "[entry]" in path.read_text()


def test_invalid_log_level(config_path):
    result = invoke(config_path, "--log-level", "loud", "version")

    assert result.exit_code == 2
