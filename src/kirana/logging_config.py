"""Logging configuration for kirana."""

import logging
import os
import sys

from pythonjsonlogger.json import JsonFormatter

LOG_LEVEL = os.environ.get("KIRANA_LOG_LEVEL", "INFO")


class KiranaJsonFormatter(JsonFormatter):
    """JSON formatter that tags every line with the service name."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["service"] = "kirana"
        if "message" in log_record:
            log_record["msg"] = log_record.pop("message")


def setup_logging(json_output: bool = True, level: str | None = None) -> None:
    """
    Configure the root logger.

    The API server logs JSON lines to stdout; the CLI logs plain text to
    stderr so command output stays readable.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level or LOG_LEVEL)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_output:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            KiranaJsonFormatter(
                "%(levelname)s %(name)s %(message)s",
                rename_fields={"levelname": "level"},
            )
        )
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root_logger.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
