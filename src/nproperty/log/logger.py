import json
import logging
import sys
from datetime import datetime
from enum import Enum
from typing import Literal, TextIO

from rich.console import Console
from rich.logging import RichHandler


class LogLevel(Enum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class LogOutputKind(Enum):
    CONSOLE = "stream"
    FILE = "file"
    RICH = "rich"


class LogOutput:
    def __init__(
        self,
        id: str | None = None,
        *,
        kind: LogOutputKind,
        file: str | None = None,
        stream: TextIO | None = None,
        level: LogLevel = LogLevel.INFO,
        format: Literal["plain", "jsonl"] = "plain",
        auto_timestamp: bool = True,
    ):
        self.__id = id
        self.__kind = kind
        self.__format: Literal["plain", "jsonl"] = format
        self.__auto_timestamp: bool = auto_timestamp
        assert file is None or stream is None, "Cannot specify both file and stream"
        assert (kind == LogOutputKind.FILE and file is not None) or (
            kind != LogOutputKind.FILE and file is None
        ), "A file output needs a file, and only a file output accepts one"
        self.__level = level
        self.__handler: logging.Handler
        match kind:
            case LogOutputKind.FILE:
                assert file is not None
                self.__handler = logging.FileHandler(file)
            case LogOutputKind.CONSOLE:
                self.__handler = logging.StreamHandler(stream)
            case LogOutputKind.RICH:
                # Rich renders its own time column
                self.__auto_timestamp = False
                self.__handler = RichHandler(
                    console=Console(file=stream or sys.stderr),
                    show_path=False,
                )
        self.__handler.setLevel(level.value)

        match format:
            case "plain" if kind == LogOutputKind.RICH:
                formatter = logging.Formatter("%(message)s")
            case "plain":
                formatter = logging.Formatter("[%(name)s:%(levelname)s] %(message)s")
            case "jsonl":
                formatter = logging.Formatter("%(message)s")
            case _:
                raise ValueError(f"Invalid format: {format}")
        self.__handler.setFormatter(formatter)

    @property
    def level(self) -> LogLevel:
        return self.__level

    @property
    def id(self) -> str | None:
        return self.__id

    @property
    def kind(self) -> LogOutputKind:
        return self.__kind

    @property
    def format(self) -> Literal["plain", "jsonl"]:
        return self.__format

    @property
    def auto_timestamp(self) -> bool:
        return self.__auto_timestamp

    @property
    def handler(self) -> logging.Handler:
        return self.__handler

    def flush(self):
        self.__handler.flush()

    @staticmethod
    def stdout(id: str | None = None, *, level: LogLevel = LogLevel.INFO) -> "LogOutput":
        return LogOutput(id, kind=LogOutputKind.CONSOLE, stream=sys.stdout, level=level)

    @staticmethod
    def stderr(id: str | None = None, *, level: LogLevel = LogLevel.INFO) -> "LogOutput":
        return LogOutput(id, kind=LogOutputKind.CONSOLE, stream=sys.stderr, level=level)

    @staticmethod
    def file(
        file: str, *, id: str | None = None, level: LogLevel = LogLevel.INFO
    ) -> "LogOutput":
        return LogOutput(id, kind=LogOutputKind.FILE, file=file, level=level)

    @staticmethod
    def rich(
        id: str | None = None,
        *,
        stream: TextIO | None = None,
        level: LogLevel = LogLevel.INFO,
    ) -> "LogOutput":
        """A colored console output rendered by `rich`, on stderr unless `stream` is given."""
        return LogOutput(id, kind=LogOutputKind.RICH, stream=stream, level=level)

    def set_formatter(self, formatter: logging.Formatter):
        self.__handler.setFormatter(formatter)


class Logger:
    """A logger that writes `header: message` records to a set of outputs.

    Every output picks a format (`plain` or `jsonl`) and whether records carry a
    timestamp. Plain records without a timestamp go through `logging.getLogger(name)`
    and propagate to the standard logging hierarchy; the other variants use private
    child loggers that only feed their own outputs.
    """

    def __init__(
        self,
        name: str,
        *,
        outputs: list[LogOutput] | None = None,
    ):
        self.__name = name
        self.__underlying_logger: logging.Logger = logging.getLogger(name)
        self.__underlying_logger_with_timestamp = self.__private_logger("timestamped")
        self.__underlying_jsonl_logger = self.__private_logger("jsonl")
        self.__underlying_jsonl_logger_with_timestamp = self.__private_logger(
            "jsonl_timestamped"
        )

        self.__outputs: dict[str, LogOutput] = {}
        for output in outputs or []:
            self.add_output(output)

    def __private_logger(self, variant: str) -> logging.Logger:
        logger = logging.getLogger(f"{self.__name}.{variant}")
        logger.propagate = False
        if not logger.handlers:
            # Keeps records away from logging.lastResort when no output is attached
            logger.addHandler(logging.NullHandler())
        return logger

    @property
    def name(self) -> str:
        return self.__name

    def __route(self, output: LogOutput) -> logging.Logger:
        match output.format, output.auto_timestamp:
            case "plain", False:
                return self.__underlying_logger
            case "plain", True:
                return self.__underlying_logger_with_timestamp
            case "jsonl", True:
                return self.__underlying_jsonl_logger_with_timestamp
            case "jsonl", False:
                return self.__underlying_jsonl_logger
            case _:
                raise ValueError(f"Invalid format: {output.format}")

    def add_output(self, output: LogOutput):
        underlying = self.__route(output)
        underlying.addHandler(output.handler)
        if underlying.getEffectiveLevel() > output.level.value:
            underlying.setLevel(output.level.value)
        if output.id is not None:
            self.__outputs[output.id] = output

    def remove_output(self, output: str | LogOutput):
        if isinstance(output, str):
            output = self.__outputs[output]
        assert isinstance(output, LogOutput)
        self.__route(output).removeHandler(output.handler)
        if output.id is not None:
            del self.__outputs[output.id]

    def set_level(self, level: LogLevel):
        self.__underlying_logger.setLevel(level.value)

    def log(
        self,
        level: Literal["debug", "info", "warning", "error", "critical"] | LogLevel,
        header: str,
        message: object,
    ):
        if isinstance(level, LogLevel):
            level_number = level.value
        else:
            level_number = getattr(logging, level.upper())

        self.__underlying_logger.log(level_number, f"{header}: {message}")
        if self.__underlying_jsonl_logger.isEnabledFor(level_number):
            self.__underlying_jsonl_logger.log(
                level_number,
                json.dumps({"header": header, "message": message}, default=str),
            )
        timestamp = datetime.now().isoformat()
        self.__underlying_logger_with_timestamp.log(
            level_number, f"{header}@{timestamp}: {message}"
        )
        if self.__underlying_jsonl_logger_with_timestamp.isEnabledFor(level_number):
            self.__underlying_jsonl_logger_with_timestamp.log(
                level_number,
                json.dumps(
                    {
                        "timestamp": timestamp,
                        "header": header,
                        "message": message,
                    },
                    default=str,
                ),
            )

    def debug(self, header: str, message: object):
        self.log("debug", header, message)

    def info(self, header: str, message: object):
        self.log("info", header, message)

    def warning(self, header: str, message: object):
        self.log("warning", header, message)

    def error(self, header: str, message: object):
        self.log("error", header, message)

    def critical(self, header: str, message: object):
        self.log("critical", header, message)
