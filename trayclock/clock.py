from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any, Protocol

from PIL import Image

from .render import ICON_SIZE, format_clock, render_icon, title_for
from .store import Store
from .theme import PALETTE
from .utils import ms_until_next_minute

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """tk.Tk 的 after / after_cancel 子集。"""

    def after(self, ms: int, func: Callable[[], Any]) -> str: ...

    def after_cancel(self, id: str) -> None: ...


class IconSink(Protocol):
    def set_icon(self, image: Image.Image) -> None: ...

    def set_title(self, text: str) -> None: ...


class ClockTicker:
    """
    每次状态变化重画图标，并在下一个整分附近再画一次。
    - 同一时间最多只有一个定时器；状态变化时若已有定时器，只重画不重排
    - 延迟每次都按当前秒数重新计算，不会累积漂移
    - stop() 取消定时器并取消订阅
    """

    def __init__(
        self,
        root: Scheduler,
        store: Store,
        icon: IconSink,
        palette: Sequence[str] = PALETTE,
        now: Callable[[], datetime] = datetime.now,
        size: int = ICON_SIZE,
    ) -> None:
        self.root = root
        self.store = store
        self.icon = icon
        self.palette = palette
        self.now = now
        self.size = size
        self.after_id: str | None = None
        self.is_running = False
        self._unsubscribe: Callable[[], None] | None = None

    def start(self) -> None:
        if self.is_running:
            return
        self.is_running = True
        self._unsubscribe = self.store.subscribe(self.refresh)
        self.refresh()

    def stop(self) -> None:
        if not self.is_running:
            return
        self.is_running = False
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self.after_id is not None:
            try:
                self.root.after_cancel(self.after_id)
            except Exception:
                logger.debug("取消定时器失败", exc_info=True)
        self.after_id = None

    def refresh(self) -> None:
        if not self.is_running:
            return
        now = self._render()
        if self.after_id is None:
            self._schedule_tick(now)

    def _tick(self) -> None:
        self.after_id = None
        if not self.is_running:
            return
        now = self._render()
        self._schedule_tick(now)

    def _schedule_tick(self, now: datetime) -> None:
        delay = ms_until_next_minute(now)
        self.after_id = self.root.after(delay, self._tick)

    def _render(self) -> datetime:
        now = self.now()
        state = self.store.get_state()
        try:
            color = self.palette[state.color_index]
            face = format_clock(now, state.hour12)
            image = render_icon(face, color, self.size)
            self.icon.set_icon(image)
            self.icon.set_title(title_for(now))
        except Exception:
            # 跳过本次绘制，定时器照常排下一次
            logger.exception("绘制时钟图标失败")
        return now
