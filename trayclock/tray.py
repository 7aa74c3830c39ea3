from __future__ import annotations

import logging
import os
import tempfile
import threading
from collections.abc import Callable
from typing import Any

from infi.systray import SysTrayIcon
from PIL import Image

logger = logging.getLogger(__name__)

APP_TITLE = "Tray Clock"
CHANGE_COLOR_TEXT = "Change Color"
HOUR_FORMAT_TEXT = "12/24 Hour Format"
ICO_SIZES = [(16, 16), (24, 24), (32, 32), (48, 48), (64, 64), (128, 128)]


class TrayIcon:
    """
    系统托盘图标（使用 infi.systray）。
    托盘在自己的线程里跑消息循环，菜单回调用 root.after(0, ...) 转回 Tk 主线程。
    """

    def __init__(
        self,
        root: Any,
        on_change_color: Callable[[], None],
        on_toggle_hour_format: Callable[[], None],
        on_quit: Callable[[], None],
        icon_dir: str | None = None,
    ) -> None:
        self.root = root
        self.on_change_color = on_change_color
        self.on_toggle_hour_format = on_toggle_hour_format
        self.on_quit = on_quit
        self.icon_dir = icon_dir or tempfile.gettempdir()
        self.icon_path = os.path.join(self.icon_dir, f"trayclock_{os.getpid()}.ico")
        self.tray_icon: SysTrayIcon | None = None
        self.tray_thread: threading.Thread | None = None
        self._title = APP_TITLE

    def _on_main_thread(self, func: Callable[[], None]) -> Callable[[SysTrayIcon], None]:
        return lambda systray: self.root.after(0, func)

    def start(self) -> None:
        if self.tray_icon is not None:
            return
        if not os.path.exists(self.icon_path):
            # SysTrayIcon 创建时就要一个图标文件，先放一张空图
            self._write_ico(Image.new("RGBA", (128, 128), (0, 0, 0, 0)))

        # 双击托盘图标 = 切换颜色（default_menu_index=0）
        menu_options = (
            (CHANGE_COLOR_TEXT, None, self._on_main_thread(self.on_change_color)),
            (HOUR_FORMAT_TEXT, None, self._on_main_thread(self.on_toggle_hour_format)),
        )
        try:
            self.tray_icon = SysTrayIcon(
                self.icon_path,
                self._title,
                menu_options,
                on_quit=self._on_main_thread(self.on_quit),
                default_menu_index=0,
            )
        except Exception:
            logger.exception("创建系统托盘图标失败")
            self.tray_icon = None
            return

        self.tray_thread = threading.Thread(target=self.tray_icon.start, daemon=True, name="tray-icon")
        self.tray_thread.start()
        logger.info("系统托盘图标已启动")

    def shutdown(self) -> None:
        if self.tray_icon is not None:
            try:
                self.tray_icon.shutdown()
            except Exception:
                logger.warning("停止托盘图标时出错", exc_info=True)
            self.tray_icon = None
        try:
            os.remove(self.icon_path)
        except OSError:
            pass

    def _write_ico(self, image: Image.Image) -> None:
        image.save(self.icon_path, format="ICO", sizes=ICO_SIZES)

    def set_icon(self, image: Image.Image) -> None:
        try:
            self._write_ico(image)
            if self.tray_icon is not None:
                self.tray_icon.update(icon=self.icon_path)
        except Exception:
            # 更新失败只记日志，不影响时钟继续走
            logger.warning("更新托盘图标失败", exc_info=True)

    def set_title(self, text: str) -> None:
        self._title = text
        if self.tray_icon is None:
            return
        try:
            self.tray_icon.update(hover_text=text)
        except Exception:
            logger.warning("更新托盘悬停文本失败", exc_info=True)
