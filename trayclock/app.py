from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from functools import partial
from typing import Any

from .clock import ClockTicker, IconSink
from .monitor import THEME_POLL_MS, ThemeMonitor
from .platform_windows import detect_system_theme
from .settings import PreferenceStore, PreferenceWriter, load_initial_state, migrate_legacy_preferences
from .state import change_color, reduce, toggle_hour_format
from .store import Store
from .theme import PALETTE, Theme

logger = logging.getLogger(__name__)


class ClockApp:
    """
    应用上下文：启动时构造一次，持有 store 并把它交给
    时钟、主题监视器和托盘输入处理，不使用全局状态。
    """

    def __init__(
        self,
        root: Any,
        prefs: PreferenceStore,
        icon: IconSink | None = None,
        detect_theme: Callable[[], Theme] = detect_system_theme,
        palette: Sequence[str] = PALETTE,
        poll_ms: int = THEME_POLL_MS,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.root = root
        self.prefs = prefs
        self.palette = palette

        theme = detect_theme()
        migrate_legacy_preferences(prefs, theme, len(palette))
        self.store = Store(partial(reduce, palette_size=len(palette)), load_initial_state(prefs, theme, palette))
        logger.info("初始状态: %s", self.store.get_state())

        self.writer = PreferenceWriter(self.store, prefs)
        self._unsubscribe_writer: Callable[[], None] | None = None

        if icon is None:
            from .tray import TrayIcon

            icon = TrayIcon(
                root,
                on_change_color=self.on_icon_click,
                on_toggle_hour_format=self.on_toggle_hour_format,
                on_quit=self.quit,
            )
        self.icon = icon
        self.ticker = ClockTicker(root, self.store, icon, palette=palette, now=now)
        self.monitor = ThemeMonitor(root, self.store, prefs, detect_theme, poll_ms=poll_ms, palette=palette)
        self.is_running = False

    def on_icon_click(self) -> None:
        self.store.dispatch(change_color())

    def on_toggle_hour_format(self) -> None:
        self.store.dispatch(toggle_hour_format())

    def start(self) -> None:
        if self.is_running:
            return
        self.is_running = True
        # 先挂持久化，再挂绘制：同一次派发里先写偏好
        self._unsubscribe_writer = self.store.subscribe(self.writer)
        start_tray = getattr(self.icon, "start", None)
        if start_tray is not None:
            start_tray()
        self.ticker.start()
        self.monitor.start(self.store.get_state().theme)

    def stop(self) -> None:
        if not self.is_running:
            return
        self.is_running = False
        self.monitor.stop()
        self.ticker.stop()
        if self._unsubscribe_writer is not None:
            self._unsubscribe_writer()
            self._unsubscribe_writer = None
        shutdown_tray = getattr(self.icon, "shutdown", None)
        if shutdown_tray is not None:
            shutdown_tray()
        logger.info("已停止")

    def quit(self) -> None:
        self.stop()
        self.root.destroy()
