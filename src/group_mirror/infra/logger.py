# 日志输出模块：提供统一的日志输出功能
#
# 主要功能：
#   - log_info() / log_success() / log_warning()：输出到 stdout
#   - log_error()：输出到 stderr
#   - log_debug()：仅在 verbose 模式下输出
#
# 特性：
#   - 带时间戳和级别标签
#   - TTY 下彩色输出（colorama 负责 Windows 控制台转换）
#   - 多线程并发写入时按行加锁，避免输出交错

import sys
import threading
from datetime import datetime

import colorama

colorama.init()

COLOR_RESET = '\033[0m'
COLOR_INFO = '\033[0;36m'      # cyan
COLOR_SUCCESS = '\033[0;32m'   # green
COLOR_ERROR = '\033[0;31m'     # red
COLOR_WARNING = '\033[0;33m'   # yellow
COLOR_DEBUG = '\033[2m'        # faint

_write_lock = threading.Lock()
_state = {"verbose": False}


def set_verbose(enabled: bool) -> None:
    """开启/关闭 debug 输出"""
    _state["verbose"] = bool(enabled)


def _use_color(stream) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


def _get_timestamp() -> str:
    return datetime.now().strftime('%Y-%m-%d %H:%M:%S')


def _format_message(level: str, color: str, message: str, stream) -> str:
    timestamp = _get_timestamp()
    if _use_color(stream):
        return f"{color}[{level}]{COLOR_RESET} [{timestamp}] {message}"
    return f"[{level}] [{timestamp}] {message}"


def _emit(level: str, color: str, message: str, stream=None) -> None:
    stream = stream or sys.stdout
    line = _format_message(level, color, message, stream)
    with _write_lock:
        print(line, file=stream, flush=True)


def log_info(message: str) -> None:
    _emit("INFO", COLOR_INFO, message)


def log_success(message: str) -> None:
    _emit("SUCCESS", COLOR_SUCCESS, message)


def log_warning(message: str) -> None:
    _emit("WARNING", COLOR_WARNING, message)


def log_error(message: str) -> None:
    """输出错误日志（输出到 stderr）"""
    _emit("ERROR", COLOR_ERROR, message, stream=sys.stderr)


def log_debug(message: str) -> None:
    """verbose 模式下输出调试日志"""
    if not _state["verbose"]:
        return
    _emit("DEBUG", COLOR_DEBUG, message)


def paint(text: str, color: str) -> str:
    """给一段文本上色（用于汇总输出）"""
    if not _use_color(sys.stdout):
        return text
    return f"{color}{text}{COLOR_RESET}"


def write_line(text: str = "") -> None:
    """原样输出一行（汇总表格等不带级别标签的输出）"""
    with _write_lock:
        print(text, flush=True)
