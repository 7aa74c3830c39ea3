from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from .clock import Scheduler
from .settings import PreferenceStore, read_color_index
from .state import system_color_scheme_change
from .store import Store
from .theme import PALETTE, Theme

logger = logging.getLogger(__name__)

THEME_POLL_MS = 5000


class ThemeMonitor:
    """轮询系统主题，只有主题真正变化时才派发 SYSTEM_COLOR_SCHEME_CHANGE。"""

    def __init__(
        self,
        root: Scheduler,
        store: Store,
        prefs: PreferenceStore,
        detect: Callable[[], Theme],
        poll_ms: int = THEME_POLL_MS,
        palette: Sequence[str] = PALETTE,
    ) -> None:
        self.root = root
        self.store = store
        self.prefs = prefs
        self.detect = detect
        self.poll_ms = poll_ms
        self.palette_size = len(palette)
        self.theme: Theme | None = None
        self.after_id: str | None = None
        self.is_running = False

    def start(self, current: Theme | None = None) -> None:
        if self.is_running:
            return
        self.is_running = True
        self.theme = current if current is not None else self.store.get_state().theme
        self._schedule_poll()

    def stop(self) -> None:
        self.is_running = False
        if self.after_id is None:
            return
        try:
            self.root.after_cancel(self.after_id)
        except Exception:
            logger.debug("取消主题轮询失败", exc_info=True)
        self.after_id = None

    def _schedule_poll(self) -> None:
        self.after_id = self.root.after(self.poll_ms, self._poll)

    def _poll(self) -> None:
        self.after_id = None
        if not self.is_running:
            return
        self.check()
        if self.is_running:
            self._schedule_poll()

    def check(self) -> None:
        try:
            theme = self.detect()
        except Exception:
            logger.exception("检测系统主题失败")
            return
        if theme == self.theme:
            return
        logger.info("系统主题变化: %s -> %s", getattr(self.theme, "value", None), theme.value)
        self.theme = theme
        saved = read_color_index(self.prefs, theme, self.palette_size)
        self.store.dispatch(system_color_scheme_change(theme, saved))
