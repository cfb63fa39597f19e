import json
import logging
import os
import sys
import traceback

from datetime import datetime
from logging import LogRecord


class JSONFormatter(logging.Formatter):
    def format(self, record: LogRecord) -> str:
        message_dict = {
            "level": record.levelname,
            "date": datetime.fromtimestamp(record.created).isoformat(),
            "module": f"{record.filename}:{record.lineno}",
            "process": record.process
        }
        if isinstance(record.msg, dict):
            message_dict.update(record.msg)
        else:
            message_dict["message"] = record.getMessage()

        if record.exc_info:
            message_dict["exc_info"] = {
                "type": str(record.exc_info[0]),
                "exception": str(record.exc_info[1]),
                "traceback": [
                    line.strip().replace('"', '\'').replace('\n', '')
                    for line in traceback.format_tb(record.exc_info[2])
                ]
            }
        if record.exc_text:
            message_dict["exc_text"] = record.exc_text

        return json.dumps(message_dict)


class Logger:
    _text_format = '%(asctime)s - pid:%(process)d [%(levelname)-.1s] %(name)s:%(lineno)d - %(message)s'

    @staticmethod
    def _get_level(default_level: int) -> int:
        value = os.environ.get('LOG_LEVEL', None)
        if value is None:
            return default_level

        level = logging.getLevelName(value.upper().strip())
        if not isinstance(level, int):
            return default_level
        return level

    @staticmethod
    def _is_json() -> bool:
        return os.environ.get('LOG_JSON', 'NO').upper().strip() in ('YES', 'ON', 'TRUE')

    @staticmethod
    def setup(default_level: int = logging.WARNING) -> None:
        """Logs go to stderr, stdout carries the command output."""
        handler = logging.StreamHandler(sys.stderr)
        if Logger._is_json():
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(logging.Formatter(Logger._text_format))

        logging.basicConfig(handlers=[handler], level=Logger._get_level(default_level), force=True)
