"""
틱 신호를 발생시키는 시계
"""

import threading
from typing import Callable, Optional


class IntervalClock:
    """
    주기적으로 콜백을 호출하는 시계 (별도 스레드)
    stop()은 즉시 반영되며 진행 중인 틱은 끝까지 실행된다
    """

    def __init__(self, interval: float = 1.0):
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() \
            and not self._stop_event.is_set()

    def start(self, callback: Callable[[], None]):
        if self.is_running:
            return
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._loop, args=(callback, self._stop_event),
                                        daemon=True)
        self._thread.start()

    def stop(self):
        self._stop_event.set()
        thread = self._thread
        self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval * 2)

    def _loop(self, callback: Callable[[], None], stop_event: threading.Event):
        """시뮬레이션 루프 (별도 스레드)"""
        while not stop_event.wait(self.interval):
            callback()


class ManualClock:
    """fire()를 호출할 때만 틱을 발생시키는 시계 (CLI/테스트용)"""

    def __init__(self):
        self._callback: Optional[Callable[[], None]] = None

    @property
    def is_running(self) -> bool:
        return self._callback is not None

    def start(self, callback: Callable[[], None]):
        self._callback = callback

    def stop(self):
        self._callback = None

    def fire(self, count: int = 1) -> int:
        """
        틱 발생

        Returns:
            실제로 발생한 틱 수 (정지 상태면 0)
        """
        fired = 0
        for _ in range(count):
            if self._callback is None:
                break
            self._callback()
            fired += 1
        return fired
