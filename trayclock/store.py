from __future__ import annotations

import logging
from collections.abc import Callable

from .state import Action, ClockState, init

logger = logging.getLogger(__name__)

Reducer = Callable[[ClockState, Action], ClockState]
Listener = Callable[[], None]


class Store:
    """
    类 Redux 的状态容器：
    - dispatch 同步执行 reducer，替换状态后按注册顺序通知订阅者
    - 通知前先复制订阅者列表，通知过程中取消订阅不会打乱本轮遍历
    """

    def __init__(self, reducer: Reducer, preloaded_state: ClockState) -> None:
        self._reducer = reducer
        self._state = preloaded_state
        self._listeners: list[Listener] = []
        # 初始派发，只为让 reducer 过一遍初始状态
        self.dispatch(init())

    def get_state(self) -> ClockState:
        return self._state

    def dispatch(self, action: Action) -> None:
        self._state = self._reducer(self._state, action)
        logger.debug("dispatch %s -> %s", action.type.value, self._state)
        for listener in list(self._listeners):
            listener()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        subscribed = True

        def unsubscribe() -> None:
            nonlocal subscribed
            if not subscribed:
                return
            subscribed = False
            self._listeners.remove(listener)

        return unsubscribe
