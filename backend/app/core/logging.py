"""日志系统 - 使用 loguru + rich

支持配置模式:
- simple: 简洁模式，只显示模块与消息
- detailed: 详细模式，显示位置、上下文与堆栈
- json: JSON 格式，适合生产环境日志收集

使用方式:
    from app.core.logging import get_logger

    logger = get_logger("catalog")
    logger.info("商品已保存", product_id=12)
"""

import json
import sys
import traceback
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

from loguru import logger as loguru_logger
from rich.console import Console
from rich.traceback import install as install_rich_traceback

from app.core.config import settings
from app.core.paths import get_project_root


class LogLevel(str, Enum):
    """日志级别"""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogMode(str, Enum):
    """日志模式"""

    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


console = Console(force_terminal=True, color_system="auto")

_LEVEL_COLORS = {
    "DEBUG": "dim cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold red",
}


def _escape(text: str) -> str:
    """转义 loguru 会解析的 <> 与 {}"""
    return (
        text.replace("<", "\\<")
        .replace(">", "\\>")
        .replace("{", "{{")
        .replace("}", "}}")
    )


def _safe_for_logging(value: Any, *, _level: int = 0) -> Any:
    """把上下文值转换为可序列化结构（文件 sink 使用 serialize=True）"""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        if _level >= 4:
            return "{...}"
        return {str(k): _safe_for_logging(v, _level=_level + 1) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        if _level >= 4:
            return ["..."]
        return [_safe_for_logging(v, _level=_level + 1) for v in value]
    if isinstance(value, Path):
        return str(value)
    if hasattr(value, "model_dump"):
        try:
            return _safe_for_logging(value.model_dump(mode="json"), _level=_level + 1)
        except Exception:
            return repr(value)

    text = repr(value)
    if len(text) > 1000:
        return text[:1000] + "..."
    return text


def _relative_file(record: dict) -> str:
    file_obj = record.get("file")
    try:
        path = Path(getattr(file_obj, "path", str(file_obj or ""))).resolve()
        return str(path.relative_to(get_project_root()))
    except (ValueError, OSError):
        return getattr(file_obj, "name", str(file_obj or ""))


def format_simple(record: dict) -> str:
    """简洁格式"""
    level = record["level"].name
    module = record["extra"].get("module", "app")
    color = _LEVEL_COLORS.get(level, "white")
    return f"<{color}>[{module}]</{color}> {_escape(record['message'])}\n"


def format_detailed(record: dict) -> str:
    """详细格式"""
    level = record["level"].name
    time = record["time"].strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
    extra = record["extra"]
    color = _LEVEL_COLORS.get(level, "white")

    header = f"<dim>{time}</dim> <{color}>{level:8}</{color}>"
    location = f"<cyan>{_escape(_relative_file(record))}:{record['line']}</cyan>"
    module_tag = f"<magenta>[{extra.get('module', 'app')}]</magenta>"

    context = ""
    ctx_parts = [f"{k}={_escape(repr(v))}" for k, v in extra.items() if k != "module"]
    if ctx_parts:
        context = f" <dim>| {', '.join(ctx_parts)}</dim>"

    result = f"{header} {module_tag} {location}{context}\n    → {_escape(record['message'])}\n"

    if record["exception"]:
        exc_type, exc_value, exc_tb = record["exception"]
        if exc_value:
            tb_str = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
            result += f"\n<red>{_escape(tb_str)}</red>\n"
    return result


def format_json(record: dict) -> str:
    """JSON 格式"""
    extra = record["extra"]
    entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "module": extra.get("module", "app"),
        "file": _relative_file(record),
        "line": record["line"],
    }
    for k, v in extra.items():
        if k != "module":
            entry[k] = v
    if record["exception"]:
        exc_type, exc_value, _ = record["exception"]
        if exc_value:
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value),
            }
    # 返回值会再经过 format_map，需要转义大括号
    text = json.dumps(entry, ensure_ascii=False, default=str)
    return text.replace("{", "{{").replace("}", "}}") + "\n"


class Logger:
    """统一日志接口"""

    def __init__(self) -> None:
        self._configured = False
        self._mode = LogMode.DETAILED
        self._level = LogLevel.DEBUG

    def configure(
        self,
        mode: LogMode | str | None = None,
        level: LogLevel | str | None = None,
        log_file: str | None = None,
    ) -> None:
        """配置日志系统

        Args:
            mode: 日志模式 (simple, detailed, json)
            level: 日志级别
            log_file: 日志文件路径，留空则使用 logs/app.log
        """
        if mode is None:
            mode = settings.LOG_MODE
        if level is None:
            level = settings.LOG_LEVEL
        if log_file is None:
            log_file = settings.LOG_FILE

        if isinstance(mode, str):
            mode = LogMode(mode.lower())
        if isinstance(level, str):
            level = LogLevel(level.upper())

        self._mode = mode
        self._level = level

        loguru_logger.remove()

        if mode == LogMode.SIMPLE:
            formatter = format_simple
        elif mode == LogMode.JSON:
            formatter = format_json
        else:
            formatter = format_detailed
            install_rich_traceback(console=console, show_locals=False, width=120)

        loguru_logger.add(
            sys.stderr,
            format=formatter,
            level=level.value,
            colorize=mode != LogMode.JSON,
            backtrace=mode == LogMode.DETAILED,
            diagnose=False,
        )

        log_path = Path(log_file or "logs/app.log")
        log_path.parent.mkdir(parents=True, exist_ok=True)
        loguru_logger.add(
            str(log_path),
            format="{message}",
            level=level.value,
            rotation=settings.LOG_FILE_ROTATION,
            retention=settings.LOG_FILE_RETENTION,
            compression="gz",
            serialize=True,
        )

        self._configured = True
        loguru_logger.bind(module="logging").info(
            f"日志系统已配置: mode={mode.value}, level={level.value}, file={log_path}"
        )

    def _ensure_configured(self) -> None:
        if not self._configured:
            self.configure()

    def _log(
        self,
        level: str,
        message: str,
        *,
        module: str = "app",
        exc_info: bool = False,
        _depth: int = 0,
        **extra: Any,
    ) -> None:
        """内部日志方法"""
        self._ensure_configured()
        context = {"module": module}
        for k, v in extra.items():
            context[str(k)] = _safe_for_logging(v)
        # 调用栈：user -> Logger.info -> _log -> loguru
        loguru_logger.bind(**context).opt(depth=2 + _depth, exception=exc_info).log(
            level.upper(), message
        )

    def debug(self, message: str, *, module: str = "app", _depth: int = 0, **extra: Any) -> None:
        """调试日志"""
        self._log("debug", message, module=module, _depth=_depth, **extra)

    def info(self, message: str, *, module: str = "app", _depth: int = 0, **extra: Any) -> None:
        """信息日志"""
        self._log("info", message, module=module, _depth=_depth, **extra)

    def warning(self, message: str, *, module: str = "app", _depth: int = 0, **extra: Any) -> None:
        """警告日志"""
        self._log("warning", message, module=module, _depth=_depth, **extra)

    def error(
        self,
        message: str,
        *,
        module: str = "app",
        exc_info: bool = False,
        _depth: int = 0,
        **extra: Any,
    ) -> None:
        """错误日志"""
        self._log("error", message, module=module, exc_info=exc_info, _depth=_depth, **extra)

    def exception(self, message: str, *, module: str = "app", _depth: int = 0, **extra: Any) -> None:
        """异常日志（自动包含堆栈）"""
        self._log("error", message, module=module, exc_info=True, _depth=_depth, **extra)

    def bind(self, **context: Any) -> "BoundLogger":
        """创建绑定上下文的日志器"""
        return BoundLogger(self, context)


class BoundLogger:
    """绑定上下文的日志器"""

    def __init__(self, parent: Logger, context: dict[str, Any]) -> None:
        self._parent = parent
        self._context = context

    def debug(self, message: str, **extra: Any) -> None:
        self._parent.debug(message, _depth=1, **{**self._context, **extra})

    def info(self, message: str, **extra: Any) -> None:
        self._parent.info(message, _depth=1, **{**self._context, **extra})

    def warning(self, message: str, **extra: Any) -> None:
        self._parent.warning(message, _depth=1, **{**self._context, **extra})

    def error(self, message: str, exc_info: bool = False, **extra: Any) -> None:
        self._parent.error(message, exc_info=exc_info, _depth=1, **{**self._context, **extra})

    def exception(self, message: str, **extra: Any) -> None:
        self._parent.exception(message, _depth=1, **{**self._context, **extra})


# 全局日志实例
logger = Logger()


def get_logger(module: str) -> BoundLogger:
    """获取模块专用日志器

    Example:
        logger = get_logger("catalog")
        logger.info("商品目录已加载", count=3)
    """
    return logger.bind(module=module)
