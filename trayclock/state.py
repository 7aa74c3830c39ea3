from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from .theme import PALETTE, Theme, default_color_index


@dataclass(frozen=True)
class ClockState:
    color_index: int = 0
    hour12: bool = True
    theme: Theme = Theme.DARK


class ActionType(str, Enum):
    INIT = "init"
    CHANGE_COLOR = "change_color"
    TOGGLE_HOUR_FORMAT = "toggle_hour_format"
    SYSTEM_COLOR_SCHEME_CHANGE = "system_color_scheme_change"


@dataclass(frozen=True)
class Action:
    type: ActionType
    theme: Theme | None = None
    saved_index: int | None = None  # 该主题已保存的颜色，由派发方读取


def init() -> Action:
    return Action(ActionType.INIT)


def change_color() -> Action:
    return Action(ActionType.CHANGE_COLOR)


def toggle_hour_format() -> Action:
    return Action(ActionType.TOGGLE_HOUR_FORMAT)


def system_color_scheme_change(theme: Theme, saved_index: int | None = None) -> Action:
    return Action(ActionType.SYSTEM_COLOR_SCHEME_CHANGE, theme=theme, saved_index=saved_index)


def reduce(state: ClockState, action: Action, palette_size: int = len(PALETTE)) -> ClockState:
    """
    纯函数：根据当前状态和动作计算下一个状态。
    不认识的动作原样返回同一个对象，订阅者可以据此跳过重复工作。
    持久化不在这里做，见 settings.PreferenceWriter。
    """
    if action.type is ActionType.CHANGE_COLOR:
        return replace(state, color_index=(state.color_index + 1) % palette_size)

    if action.type is ActionType.TOGGLE_HOUR_FORMAT:
        return replace(state, hour12=not state.hour12)

    if action.type is ActionType.SYSTEM_COLOR_SCHEME_CHANGE and action.theme is not None:
        index = action.saved_index
        if index is None or not 0 <= index < palette_size:
            index = default_color_index(action.theme, palette_size)
        return replace(state, color_index=index, theme=action.theme)

    return state
