# technurture/utils/log.py
# Event logging: async file logging for request handling, sync twin for boot

import os
import datetime
import logging

from aiologger import Logger
from aiologger.handlers.files import AsyncFileHandler

from technurture.config import settings

# Keys whose values must never reach a log file
SENSITIVE_KEYS = {"password", "token", "accesstoken", "refreshtoken", "secret", "authorization"}
MASK = "***"


class Log:
    def __init__(self, log_dir: str | None = None, log_print: str | None = None):
        self.log_dir = log_dir or settings.LOG_DIR
        os.makedirs(self.log_dir, exist_ok=True)
        self.handlers = {}
        flag = settings.LOG_PRINT if log_print is None else log_print
        self.log_print = str(flag).lower() in ("1", "true", "yes")

    def build_log_path(self, now: datetime.datetime) -> str:
        """
        Daily log file path:
        log/2026/10/18.log
        """
        base_dir = os.path.join(self.log_dir, f"{now.year}", f"{now:%m}")
        os.makedirs(base_dir, exist_ok=True)
        return os.path.join(base_dir, f"{now:%d}.log")

    async def get_logger(self, target: str, now: datetime.datetime) -> Logger:
        """Async logger for target, reopened when the day rolls over."""
        log_path = self.build_log_path(now)

        if target not in self.handlers or self.handlers[target]["path"] != log_path:
            handler = AsyncFileHandler(filename=log_path, mode="a", encoding="utf-8")
            target_logger = Logger(name=f"technurture_{target}")
            target_logger.add_handler(handler)

            if target in self.handlers:
                await self.handlers[target]["logger"].shutdown()

            self.handlers[target] = {
                "path": log_path,
                "logger": target_logger,
                "handler": handler,
            }

        return self.handlers[target]["logger"]

    def format_line(self, target: str, message: str, data: dict | None, now: datetime.datetime) -> str:
        line = f"{now:%d.%m.%Y %H:%M:%S} {target}: {message}"
        if data:
            line += f": {self.safe_serialize(data)}"
        return line

    async def log_info(
        self,
        target: str = "",
        message: str = "",
        data: dict | None = None,
        is_console: bool = None,
    ):
        now = datetime.datetime.now()
        line = self.format_line(target, message, data, now)

        target_logger = await self.get_logger(target, now)
        await target_logger.info(line)

        should_print = self.log_print if is_console is None else is_console
        if should_print:
            print(line)

    async def log_warning(self, target: str = "", message: str = "", data: dict | None = None, is_console: bool = None):
        await self.log_info(target, f"WARNING: {message}", data, is_console)

    async def log_error(
        self, target: str = "", message: str = "", data: dict | None = None, is_console: bool = True
    ):
        await self.log_info(target, f"ERROR: {message}", data, is_console)

    def log_info_sync(
        self, target: str = "", message: str = "", data: dict | None = None, is_console: bool = None
    ):
        now = datetime.datetime.now()
        log_path = self.build_log_path(now)
        line = self.format_line(target, message, data, now)

        logger = logging.getLogger(f"technurture_sync_{target}")
        logger.setLevel(logging.INFO)
        logger.propagate = False

        # Replace the handler when the day (or the log dir) changes
        current = [h for h in logger.handlers if getattr(h, "baseFilename", None) == os.path.abspath(log_path)]
        if not current:
            for h in list(logger.handlers):
                logger.removeHandler(h)
                h.close()
            handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
            handler.setFormatter(logging.Formatter("%(message)s"))
            logger.addHandler(handler)

        logger.info(line)

        should_print = self.log_print if is_console is None else is_console
        if should_print:
            print(line)

    def log_warning_sync(self, target: str = "", message: str = "", data: dict | None = None, is_console: bool = None):
        self.log_info_sync(target, f"WARNING: {message}", data, is_console)

    def log_error_sync(
        self, target: str = "", message: str = "", data: dict | None = None, is_console: bool = True
    ):
        self.log_info_sync(target, f"ERROR: {message}", data, is_console)

    def safe_serialize(self, obj):
        """
        Turn obj into something printable:
        - dict, list, tuple recursively, masking secret-bearing keys
        - Pydantic models through model_dump
        - anything else becomes <TypeName>
        """
        if obj is None:
            return None
        elif isinstance(obj, (str, int, float, bool)):
            return obj
        elif isinstance(obj, dict):
            return {
                k: MASK if str(k).lower() in SENSITIVE_KEYS else self.safe_serialize(v)
                for k, v in obj.items()
            }
        elif isinstance(obj, (list, tuple, set)):
            return [self.safe_serialize(v) for v in obj]
        elif isinstance(obj, (datetime.datetime, datetime.date)):
            return obj.isoformat()
        elif hasattr(obj, "model_dump"):
            return self.safe_serialize(obj.model_dump())
        elif hasattr(obj, "__dict__"):
            return self.safe_serialize({k: v for k, v in vars(obj).items() if not k.startswith("_")})
        else:
            return f"<{type(obj).__name__}>"

    async def shutdown(self):
        for h in list(self.handlers.values()):
            await h["logger"].shutdown()
        self.handlers.clear()


# Process-wide logger for code that runs outside a request (boot, storage selection, CLI)
boot_log = Log()
