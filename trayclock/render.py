from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache

from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

ICON_SIZE = 128

# Windows 上优先 Verdana 粗体，其余平台找 DejaVu
FONT_CANDIDATES = (
    "verdanab.ttf",
    "Verdana Bold.ttf",
    "DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
)


@dataclass(frozen=True)
class ClockFace:
    hour: str
    minute: str
    marker: str  # 12 小时制下为 "A" / "P"，24 小时制为空


def format_clock(now: datetime, hour12: bool) -> ClockFace:
    if not hour12:
        return ClockFace(hour=f"{now.hour:02d}", minute=f"{now.minute:02d}", marker="")
    hour = now.hour % 12 or 12
    return ClockFace(hour=f"{hour:02d}", minute=f"{now.minute:02d}", marker="A" if now.hour < 12 else "P")


def title_for(now: datetime) -> str:
    return now.date().isoformat()


@lru_cache(maxsize=None)
def _font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    for candidate in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    logger.debug("没有找到 TrueType 字体，使用 Pillow 默认字体")
    return ImageFont.load_default(size=size)


def render_icon(face: ClockFace, color: str, size: int = ICON_SIZE) -> Image.Image:
    """
    把时间画成正方形透明图标：上半部分小时，下半部分分钟，
    右下角是 AM/PM 标记。坐标按 128 像素设计，其它尺寸等比缩放。
    """
    scale = size / ICON_SIZE
    img = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)

    big = _font(max(1, round(72 * scale)))
    draw.text((8 * scale, 64 * scale), face.hour, fill=color, font=big, anchor="ls")
    draw.text((8 * scale, 128 * scale), face.minute, fill=color, font=big, anchor="ls")
    if face.marker:
        small = _font(max(1, round(36 * scale)))
        draw.text((100 * scale, 128 * scale), face.marker, fill=color, font=small, anchor="ls")
    return img
