"""
Test CLI functionality.
"""

import logging

import pytest
from click.testing import CliRunner

from ptminfer.inference.cli import setup_logging
from ptminfer.ptminferc import cli

pytestmark = pytest.mark.cli


def test_cli_help():
    """Test CLI help output."""
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "ptminfer: cross-spectrum modification site inference" in result.output
    assert "infer" in result.output


def test_cli_version():
    """Test CLI version output."""
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_cli_infer_help():
    """Test inference CLI help."""
    runner = CliRunner()
    result = runner.invoke(cli, ["infer", "--help"])

    assert result.exit_code == 0
    assert "Resolve ambiguous modification sites" in result.output
    assert "--input-id" in result.output
    assert "--output" in result.output
    assert "--score-mode" in result.output
    assert "--variable-modifications" in result.output
    assert "--confident-threshold" in result.output


def test_cli_infer_missing_input():
    """Test that a missing input file is rejected."""
    runner = CliRunner()
    result = runner.invoke(
        cli, ["infer", "-id", "does_not_exist.idXML", "-out", "out.idXML"]
    )

    assert result.exit_code != 0


def test_cli_infer_invalid_score_mode(tmp_path):
    """Test that an unsupported score mode is rejected."""
    input_file = tmp_path / "input.idXML"
    input_file.write_text("")
    runner = CliRunner()
    result = runner.invoke(
        cli,
        [
            "infer",
            "-id",
            str(input_file),
            "-out",
            str(tmp_path / "out.idXML"),
            "--score-mode",
            "ascore",
        ],
    )

    assert result.exit_code != 0


def test_setup_logging_debug_file(tmp_path):
    """Test that debug mode logs next to the output file."""
    root_logger = logging.getLogger()
    saved_handlers = root_logger.handlers[:]
    saved_level = root_logger.level
    try:
        setup_logging(True, None, str(tmp_path / "out.idXML"))

        file_handlers = [
            h for h in root_logger.handlers if isinstance(h, logging.FileHandler)
        ]
        assert len(file_handlers) == 1
        assert file_handlers[0].baseFilename.endswith("out_inference.log")
        assert root_logger.level == logging.DEBUG
        assert logging.getLogger("pyopenms").level == logging.WARNING
        assert logging.getLogger("scipy").level == logging.WARNING
    finally:
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root_logger.addHandler(handler)
        root_logger.setLevel(saved_level)
