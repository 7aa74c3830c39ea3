from __future__ import annotations

from enum import Enum


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


# 顺序即点击切换顺序
PALETTE: tuple[str, ...] = ("white", "lightgrey", "grey", "black")


def default_color_index(theme: Theme, palette_size: int) -> int:
    # 深色主题用浅色字（第一个），浅色主题用深色字（最后一个）
    if theme is Theme.DARK:
        return 0
    return palette_size - 1
