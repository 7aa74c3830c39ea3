from __future__ import annotations

import logging
import sys

from .theme import Theme

logger = logging.getLogger(__name__)


def detect_system_theme() -> Theme:
    """
    检测 Windows 10+ 系统的“应用主题”。
    非 Windows 或检测失败时，默认按深色处理。
    """
    if not sys.platform.startswith("win"):
        return Theme.DARK
    try:
        import winreg  # type: ignore[import-not-found]

        key_path = r"Software\Microsoft\Windows\CurrentVersion\Themes\Personalize"
        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, key_path) as key:  # type: ignore[attr-defined]
            # AppsUseLightTheme: 1 = 浅色, 0 = 深色
            value, _ = winreg.QueryValueEx(key, "AppsUseLightTheme")  # type: ignore[attr-defined]
    except OSError as e:
        logger.debug("读取系统主题失败: %s", e)
        return Theme.DARK
    return Theme.DARK if value == 0 else Theme.LIGHT


def try_set_dpi_awareness() -> None:
    # Windows 更清晰的 DPI 适配（尽力而为）
    if not sys.platform.startswith("win"):
        return
    try:
        import ctypes

        ctypes.windll.shcore.SetProcessDpiAwareness(1)  # SYSTEM_DPI_AWARE
    except Exception:
        logger.debug("设置 DPI 感知失败", exc_info=True)
