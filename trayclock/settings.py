from __future__ import annotations

import json
import logging
import os
import sys
import tempfile
from collections.abc import Sequence

from .state import ClockState
from .store import Store
from .theme import PALETTE, Theme, default_color_index
from .utils import safe_int

logger = logging.getLogger(__name__)

FILENAME = "trayclock_prefs.json"
HOUR_FORMAT_KEY = "hourFormat"

# 旧版本使用的不区分主题的键
LEGACY_COLOR_INDEX_KEY = "smallClockColorIndex"
LEGACY_HOUR_FORMAT_KEY = "smallClockHourFormat"


def default_settings_path() -> str:
    """
    偏好文件路径策略（同 PyInstaller onefile 的处理方式）：
    - 优先：EXE 同目录（便携、可拷走）
    - 其次：%APPDATA%\\TrayClock\\trayclock_prefs.json
    - 开发运行时：项目根目录 trayclock_prefs.json
    """
    if getattr(sys, "frozen", False):
        exe_dir = os.path.dirname(os.path.abspath(sys.executable))
        if _can_write_dir(exe_dir):
            return os.path.join(exe_dir, FILENAME)

        appdata = os.environ.get("APPDATA") or os.path.expanduser("~")
        target_dir = os.path.join(appdata, "TrayClock")
        os.makedirs(target_dir, exist_ok=True)
        return os.path.join(target_dir, FILENAME)

    root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(root, FILENAME)


def _can_write_dir(directory: str) -> bool:
    try:
        os.makedirs(directory, exist_ok=True)
        probe = os.path.join(directory, ".__trayclock_write_test__")
        with open(probe, "w", encoding="utf-8") as f:
            f.write("ok")
        os.remove(probe)
        return True
    except OSError:
        return False


class PreferenceStore:
    """JSON 文件里的一组字符串键值；读失败当作空，写失败只记日志。"""

    def __init__(self, path: str) -> None:
        self.path = path
        self._data = self._load()

    def _load(self) -> dict[str, str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("读取偏好文件失败，使用默认值: %s (%s)", self.path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("偏好文件格式不对，忽略: %s", self.path)
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        data = dict(self._data)
        data[key] = value
        try:
            directory = os.path.dirname(os.path.abspath(self.path))
            fd, tmp = tempfile.mkstemp(prefix=".trayclock_", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp, self.path)
            except BaseException:
                os.unlink(tmp)
                raise
        except OSError as e:
            # 保存失败不影响使用，文件保持旧值
            logger.warning("保存偏好失败 %s=%s: %s", key, value, e)
            return
        self._data = data


def color_index_key(theme: Theme) -> str:
    return f"colorIndex-{theme.value}"


def _valid_index(value: str | None, palette_size: int) -> int | None:
    index = safe_int(value, None)
    if index is None or not 0 <= index < palette_size:
        return None
    return index


def read_color_index(prefs: PreferenceStore, theme: Theme, palette_size: int = len(PALETTE)) -> int | None:
    return _valid_index(prefs.get(color_index_key(theme)), palette_size)


def read_hour12(prefs: PreferenceStore) -> bool:
    # 默认 12 小时制，只有明确存了 "24" 才用 24 小时制
    return prefs.get(HOUR_FORMAT_KEY) != "24"


def load_initial_state(prefs: PreferenceStore, theme: Theme, palette: Sequence[str] = PALETTE) -> ClockState:
    index = read_color_index(prefs, theme, len(palette))
    if index is None:
        index = default_color_index(theme, len(palette))
    return ClockState(color_index=index, hour12=read_hour12(prefs), theme=theme)


def migrate_legacy_preferences(prefs: PreferenceStore, theme: Theme, palette_size: int = len(PALETTE)) -> None:
    """
    迁移旧配置：
    - 老版本只有一个全局颜色键，迁到当前主题的键下
    - 新键已存在时以新键为准，旧键不动
    """
    key = color_index_key(theme)
    if prefs.get(key) is None:
        legacy = _valid_index(prefs.get(LEGACY_COLOR_INDEX_KEY), palette_size)
        if legacy is not None:
            logger.info("迁移旧颜色设置到 %s=%d", key, legacy)
            prefs.set(key, str(legacy))

    if prefs.get(HOUR_FORMAT_KEY) is None:
        legacy_format = prefs.get(LEGACY_HOUR_FORMAT_KEY)
        if legacy_format in ("12", "24"):
            logger.info("迁移旧时间格式设置 %s=%s", HOUR_FORMAT_KEY, legacy_format)
            prefs.set(HOUR_FORMAT_KEY, legacy_format)


class PreferenceWriter:
    """
    订阅 store，比较前后状态并写入对应的偏好键。
    - 同一主题下颜色变化：写 colorIndex-<theme>
    - 主题切换：只是读取，不写
    - 12/24 切换：写 hourFormat
    """

    def __init__(self, store: Store, prefs: PreferenceStore) -> None:
        self.store = store
        self.prefs = prefs
        self._last = store.get_state()

    def __call__(self) -> None:
        old, new = self._last, self.store.get_state()
        self._last = new
        if new is old:
            return
        if new.theme == old.theme and new.color_index != old.color_index:
            self.prefs.set(color_index_key(new.theme), str(new.color_index))
        if new.hour12 != old.hour12:
            self.prefs.set(HOUR_FORMAT_KEY, "12" if new.hour12 else "24")
