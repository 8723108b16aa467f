"""Tests for the logging facade."""

import io
import json
import logging

from nproperty.log import LOGGER, LogLevel, Logger, LogOutput, LogOutputKind


def test_plain_output_without_timestamp():
    """Test that the plain format writes level, logger name and message only."""
    stream = io.StringIO()
    logger = Logger(
        "nproperty.tests.plain",
        outputs=[
            LogOutput(
                kind=LogOutputKind.CONSOLE, stream=stream, auto_timestamp=False
            )
        ],
    )

    logger.info("bind", "Config.PORT <- PORT")

    assert stream.getvalue() == "[nproperty.tests.plain:INFO] bind: Config.PORT <- PORT\n"


def test_jsonl_output_with_timestamp():
    """Test that the timestamped JSONL format writes one JSON object per record."""
    stream = io.StringIO()
    logger = Logger("nproperty.tests.jsonl")
    logger.add_output(
        LogOutput("json", kind=LogOutputKind.CONSOLE, stream=stream, format="jsonl")
    )

    logger.warning("miss", "PORT")
    record = json.loads(stream.getvalue())

    assert record["header"] == "miss"
    assert record["message"] == "PORT"
    assert "timestamp" in record

    logger.remove_output("json")
    logger.warning("miss", "HOST")
    assert stream.getvalue().count("\n") == 1


def test_output_level_filters_records():
    """Test that an output drops records below its own level."""
    stream = io.StringIO()
    logger = Logger(
        "nproperty.tests.level",
        outputs=[
            LogOutput(
                kind=LogOutputKind.CONSOLE,
                stream=stream,
                level=LogLevel.WARNING,
                auto_timestamp=False,
            )
        ],
    )

    logger.info("load", "ignored")
    logger.error("load", "kept")

    assert "ignored" not in stream.getvalue()
    assert "kept" in stream.getvalue()


def test_rich_output():
    """Test that the rich output renders records to its console stream."""
    stream = io.StringIO()
    logger = Logger(
        "nproperty.tests.rich", outputs=[LogOutput.rich(stream=stream)]
    )

    logger.info("load", "3 properties from main.properties")

    assert "3 properties from main.properties" in stream.getvalue()


def test_binder_records_propagate(caplog):
    """Test that binder warnings reach the standard logging tree."""
    caplog.set_level(logging.DEBUG, logger="nproperty")

    LOGGER.debug("load", "from test")

    assert any(
        record.name == "nproperty" and record.getMessage() == "load: from test"
        for record in caplog.records
    )


def test_file_output(tmp_path):
    """Test that a file output writes timestamped records and flushes them to disk."""
    path = tmp_path / "nproperty.log"
    output = LogOutput.file(str(path), id="file", level=LogLevel.DEBUG)
    logger = Logger("nproperty.tests.file", outputs=[output])

    logger.critical("load", "main.properties is unreadable")
    output.flush()
    logger.remove_output("file")
    output.handler.close()

    text = path.read_text()
    assert text.startswith("[nproperty.tests.file.timestamped:CRITICAL] load@")
    assert text.rstrip().endswith(": main.properties is unreadable")


def test_stdout_output_with_custom_formatter(capsys):
    """Test that a stdout output uses the formatter set on it."""
    output = LogOutput.stdout("out", level=LogLevel.DEBUG)
    output.set_formatter(logging.Formatter("%(levelname)s|%(message)s"))
    logger = Logger("nproperty.tests.stdout", outputs=[output])

    logger.debug("bind", "Config.PORT <- PORT")
    logger.remove_output(output)

    out = capsys.readouterr().out
    assert out.startswith("DEBUG|bind@")
    assert out.rstrip().endswith(": Config.PORT <- PORT")


def test_set_level_and_name():
    """Test the logger name and that set_level raises the plain logger's threshold."""
    stream = io.StringIO()
    logger = Logger(
        "nproperty.tests.set_level",
        outputs=[
            LogOutput(
                kind=LogOutputKind.CONSOLE,
                stream=stream,
                level=LogLevel.DEBUG,
                auto_timestamp=False,
            )
        ],
    )
    assert logger.name == "nproperty.tests.set_level"

    logger.set_level(LogLevel.CRITICAL)
    logger.error("load", "dropped")
    logger.critical("load", "kept")

    assert stream.getvalue() == "[nproperty.tests.set_level:CRITICAL] load: kept\n"
