# hexo_llm_translate/logging_config.py
"""
本模块负责集中配置插件的日志系统。

构建日志通常夹在站点生成器自身的输出之间，因此 console 模式使用 Rich 渲染为
紧凑的单行（级别、记录器、消息、键值对），json 模式则输出机器可读的行。
"""

import logging
from collections.abc import MutableMapping
from typing import Any, Literal

import structlog
from rich.console import Console
from rich.text import Text
from structlog.typing import Processor

APP_LOGGER_NAME = "hexo_llm_translate"


class RichLineRenderer:
    """将 structlog 事件渲染为带颜色的单行文本的处理器。"""

    def __init__(self, kv_truncate_at: int = 120, show_timestamp: bool = True):
        self._console = Console(stderr=True)
        self._kv_truncate_at = kv_truncate_at
        self._show_timestamp = show_timestamp
        self._level_styles = {
            "debug": "blue",
            "info": "green",
            "warning": "yellow",
            "error": "bold red",
            "critical": "bold magenta",
        }

    def __call__(
        self, logger: Any, name: str, event_dict: MutableMapping[str, Any]
    ) -> str:
        event = str(event_dict.pop("event", "")).strip()
        if not event:
            return ""

        timestamp = event_dict.pop("timestamp", "")
        level = str(event_dict.pop("level", "info")).lower()
        logger_name = event_dict.pop("logger", "")
        exception = event_dict.pop("exception", None)

        line = Text()
        if self._show_timestamp and timestamp:
            line.append(f"{timestamp} ", style="dim")
        line.append(f"{level.upper():<8}", style=self._level_styles.get(level, ""))
        if logger_name:
            line.append(f" [{logger_name}]", style="cyan dim")
        line.append(f" {event}")

        for key, value in sorted(event_dict.items()):
            value_repr = value if isinstance(value, str) else repr(value)
            if len(value_repr) > self._kv_truncate_at:
                value_repr = value_repr[: self._kv_truncate_at] + "…"
            line.append(f" {key}=", style="dim")
            line.append(value_repr, style="bright_white")

        with self._console.capture() as capture:
            self._console.print(line, soft_wrap=True)
        rendered = capture.get().rstrip()
        if exception:
            rendered = f"{rendered}\n{exception}"
        return rendered


def setup_logging(
    log_level: str = "INFO",
    log_format: Literal["json", "console"] = "console",
    show_timestamp: bool = True,
) -> None:
    """
    配置全局的 structlog 日志系统，由 CLI 或驱动程序在启动时调用一次。

    Args:
        log_level: 插件记录器的最低日志级别。
        log_format: 'console' 用于本地构建，'json' 用于 CI 中的机器可读输出。
        show_timestamp: console 模式下是否显示时间戳。

    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="%H:%M:%S", utc=False),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "console":
        processors.append(RichLineRenderer(show_timestamp=show_timestamp))
    else:
        processors[3] = structlog.processors.TimeStamper(fmt="iso", utc=True)
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()

    class PassthroughFormatter(logging.Formatter):
        """直接传递 structlog 已经渲染好的字符串。"""

        def format(self, record: logging.LogRecord) -> str:
            return str(record.getMessage())

    handler.setFormatter(PassthroughFormatter())

    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(log_level.upper())
    app_logger.propagate = True

    structlog.get_logger("hexo_llm_translate.logging_config").debug(
        "日志系统已配置完成。", log_format=log_format, app_log_level=log_level.upper()
    )
