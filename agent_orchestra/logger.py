import json
import sys
from collections import OrderedDict
from typing import Dict, List, Optional

import loguru
import yaml
from loguru import logger as loguru_logger

LLM_LEVEL_NAME = "LLM"
PROMPT_LEVEL_NAME = "PROMPT"
PLAN_LEVEL_NAME = "PLAN"


class LongStrDumper(yaml.Dumper):
    """Dumper that writes multi-line strings as literal blocks."""


def _str_presenter(dumper, data):
    if len(data.splitlines()) > 1:
        data = "\n".join([line.rstrip() for line in data.strip().splitlines()])
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", str(data))


LongStrDumper.add_representer(str, _str_presenter)


def write_yaml_str(data: dict) -> str:
    return yaml.dump(data, Dumper=LongStrDumper, sort_keys=False)


class Formatter:
    def __init__(self):
        self.padding = 0
        self.fmt = "[<green><b>{time:YYYY-MM-DD hh:mm:ss.SS}</b></green>][<cyan><b>{file}:{line}</b></cyan> - <cyan>{name:}:{function}</cyan>][<level>{level}</level>] {message}\n"

    def format(self, record):
        length = len("{file}:{line} - {name:}:{function}".format(**record))
        self.padding = max(self.padding, length)
        record["extra"]["padding"] = " " * (self.padding - length)
        fmt = ""
        if record["level"].name == LLM_LEVEL_NAME and "message" in record["extra"]:
            fmt = "<LY>================[[<b> {extra[model]} Response</b> (time={extra[elapsed_time]}  total_tokens={extra[usage][total_tokens]})]]================</LY>\n{extra[message]}\n"
        elif (
            record["level"].name == PROMPT_LEVEL_NAME and "messages" in record["extra"]
        ):
            for message in record["extra"]["messages"]:
                fmt += (
                    f"<LC>===================[[<b>{message['role']:}</b>]]===================</LC>\n"
                    f"{message['content']}\n"
                )
        elif record["level"].name == PLAN_LEVEL_NAME and "plan" in record["extra"]:
            fmt = "<LM>===================[[<b> plan </b>]]===================</LM>\n{extra[plan]}\n"
        return self.fmt + fmt


def serialize(record):
    subset = OrderedDict()
    subset["level"] = record["level"].name
    subset["message"] = record["message"]
    subset["time"] = record["time"].strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
    subset["file"] = {
        "name": record["file"].name,
        "path": record["file"].path,
        "function": record["function"],
        "line": record["line"],
    }
    subset["extra"] = record["extra"]
    return json.dumps(subset, default=str)


def _escape_markup(text: str) -> str:
    text = text.replace("{", "{{").replace("}", "}}")
    return text.replace("<", "\\<")


def patching(record):
    record["extra"]["serialized"] = serialize(record)

    if record["level"].name == LLM_LEVEL_NAME and "message" in record["extra"]:
        record["extra"]["message"] = _escape_markup(
            str(record["extra"]["message"])
        ).replace(">", "\\>")
    elif record["level"].name == PROMPT_LEVEL_NAME and "messages" in record["extra"]:
        messages: List[Dict[str, str]] = record["extra"]["messages"]
        record["extra"]["messages"] = [
            {**m, "content": _escape_markup(str(m.get("content") or ""))}
            for m in messages
        ]
    elif record["level"].name == PLAN_LEVEL_NAME and "plan" in record["extra"]:
        plan = record["extra"]["plan"]
        if not isinstance(plan, str):
            plan = write_yaml_str(plan)
        record["extra"]["plan"] = _escape_markup(plan)


class LoggerManager:
    """Owns the single loguru logger used across the package."""

    def __init__(self):
        self._handler_id: Optional[int] = None
        self._is_configured = False
        self._logger: loguru.Logger = loguru_logger.patch(patching)
        self._logger.remove()
        self._logger.level(PROMPT_LEVEL_NAME, no=15, color="<white><bold>", icon="📋")
        self._logger.level(LLM_LEVEL_NAME, no=15, color="<lm><bold>", icon="🤖")
        self._logger.level(PLAN_LEVEL_NAME, no=18, color="<blue><bold>", icon="🗺")

    def configure(self, level: int | str = 15) -> "loguru.Logger":
        """(Re)install the stdout handler at the given level."""
        if self._is_configured and self._handler_id is not None:
            self._logger.remove(self._handler_id)

        formatter = Formatter()
        self._handler_id = self._logger.add(
            sys.stdout, format=formatter.format, level=level
        )
        self._is_configured = True
        return self._logger

    def get_logger(self) -> "loguru.Logger":
        if not self._is_configured:
            return self.configure()
        return self._logger


_logger_manager = LoggerManager()


def configure_logger(level: int | str = 15) -> "loguru.Logger":
    return _logger_manager.configure(level)


def get_logger() -> "loguru.Logger":
    return _logger_manager.get_logger()


def component_logger(
    component: str, logger: Optional["loguru.Logger"] = None
) -> "loguru.Logger":
    """Return the injected logger, or the package logger bound to ``component``."""
    if logger is not None:
        return logger
    return get_logger().bind(component=component)


def add_sink(sink: str, level: int | str = 15) -> int:
    """Add a file sink using the package formatter."""
    return _logger_manager._logger.add(sink, format=Formatter().format, level=level)


def remove_sink(handler_id: int) -> None:
    _logger_manager._logger.remove(handler_id)


logger = get_logger()
