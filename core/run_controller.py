"""
시뮬레이션 실행 제어 모듈
- 틱 신호 시작/정지 및 최초 디스패치
- 틱 사이에 적용되는 수동 명령 (생성, 일시정지, 재개, 종료, 재시작, 삭제, 재정렬, 이름 변경)
"""

import threading
from collections import deque
from typing import Callable, Dict, List, Optional

from .clock import IntervalClock
from .config import SimulationConfig
from .errors import (DuplicateIdError, InvalidIndexError, InvalidTransitionError,
                     InvariantViolationError, ProcessNotFoundError, SchedulerError)
from .process import PID, Process, ProcessState, pid_key
from .queue_store import ProcessQueue


class RunController:
    """
    큐에 대한 유일한 쓰기 주체
    틱과 수동 명령은 같은 락으로 직렬화된다
    """

    def __init__(self, config: Optional[SimulationConfig] = None, clock=None,
                 scheduler=None, raise_errors: bool = False):
        """
        Args:
            config: 시뮬레이션 설정
            clock: start(callback)/stop()을 제공하는 시계 (기본: IntervalClock)
            scheduler: advance()/dispatch_next()를 제공하는 틱 엔진
            raise_errors: True면 사용자 오류를 알림 기록 후 다시 발생시킴
        """
        if scheduler is None:
            from schedulers.fifo_aging import FIFOAgingScheduler
            scheduler = FIFOAgingScheduler()

        self.config = config or SimulationConfig()
        self.clock = clock or IntervalClock(self.config.tick_interval)
        self.scheduler = scheduler
        self.raise_errors = raise_errors

        self.queue = ProcessQueue()
        self.completed: List[Process] = []  # 큐에서 옮겨진 종료 프로세스
        self.current_tick = 0
        self.running = False
        self.notifications = deque(maxlen=self.config.notification_limit)

        self._lock = threading.RLock()
        self._next_pid = 1

    @property
    def event_log(self) -> List[str]:
        return self.scheduler.event_log

    def log_event(self, message: str):
        """이벤트 로그 기록 (엔진 로그와 같은 목록)"""
        self.scheduler.current_time = self.current_tick
        self.scheduler.log_event(message)

    def notify(self, level: str, message: str):
        """일시적 알림 기록 (최신 항목이 앞)"""
        self.notifications.appendleft({'level': level, 'message': message,
                                       'tick': self.current_tick})
        self.log_event(f"[{level.upper()}] {message}")

    def _report(self, error: SchedulerError, level: str = 'warning'):
        """사용자 오류 처리: 알림으로 보고하고 무시 (raise_errors면 다시 발생)"""
        self.notify(level, str(error))
        if self.raise_errors:
            raise error

    def _idle_state(self) -> ProcessState:
        return ProcessState.READY if self.running else ProcessState.INACTIVE

    # ------------------------------------------------------------------
    # 실행 제어
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """
        시뮬레이션 시작

        Returns:
            시작되었는지 여부 (실행할 프로세스가 없으면 False)
        """
        with self._lock:
            if self.running:
                return True

            for process in self.queue:
                if process.state not in (ProcessState.TERMINATED, ProcessState.SUSPENDED):
                    process.state = ProcessState.READY

            if not (self.queue.with_state(ProcessState.READY) or self.queue.running()):
                self.notify('info', "실행할 프로세스가 없습니다")
                return False

            self.running = True
            self.log_event("===== Simulation Started =====")

            # 최초 디스패치 (첫 실행이면 PID 오름차순)
            self.scheduler.current_time = self.current_tick
            self.scheduler.dispatch_next(self.queue, self.current_tick)
            self.queue.validate()

        self.clock.start(self._on_clock_tick)
        return True

    def stop(self):
        """시뮬레이션 정지 (종료되지 않은 프로세스는 Inactive)"""
        with self._lock:
            was_running = self.running
            self.running = False
            for process in self.queue:
                if process.state != ProcessState.TERMINATED:
                    process.state = ProcessState.INACTIVE
            if was_running:
                self.log_event("===== Simulation Stopped =====")

        # 락 밖에서 정지 (시계 스레드가 락을 기다리는 중일 수 있음)
        self.clock.stop()

    def tick(self) -> ProcessQueue:
        """틱 한 번 실행 후 결과 큐 반영"""
        with self._lock:
            # 정지 상태에서는 틱이 발생하지 않음
            if not self.running:
                return self.queue

            self.queue = self.scheduler.advance(self.queue, self.current_tick)
            self.current_tick += 1

            if self.config.auto_archive:
                self.archive_completed()
            return self.queue

    def _on_clock_tick(self):
        with self._lock:
            if not self.running:
                return
            try:
                self.tick()
            except InvariantViolationError as e:
                # 해당 틱만 중단, 루프는 계속
                self.notify('error', f"틱 중단: {e}")

    def run_until_idle(self, max_ticks: Optional[int] = None,
                       on_tick: Optional[Callable[['RunController'], None]] = None) -> int:
        """
        처리할 프로세스가 없을 때까지 동기적으로 틱 실행

        Returns:
            실행한 틱 수
        """
        limit = max_ticks or self.config.max_ticks
        if not self.running and not self.start():
            return 0

        ticks = 0
        while self.queue.has_active():
            # 무한 루프 방지
            if ticks >= limit:
                self.log_event("WARNING: Simulation timeout")
                break
            self.tick()
            ticks += 1
            if on_tick is not None:
                on_tick(self)
        return ticks

    # ------------------------------------------------------------------
    # 수동 명령
    # ------------------------------------------------------------------

    def _generate_pid(self) -> int:
        taken = {pid_key(p.pid) for p in self.queue}
        taken.update(pid_key(p.pid) for p in self.completed)
        while pid_key(self._next_pid) in taken:
            self._next_pid += 1
        pid = self._next_pid
        self._next_pid += 1
        return pid

    def create(self, name: str, total_time: int, quantum: Optional[int] = None,
               aging_counter_initial: Optional[int] = None,
               pid: Optional[PID] = None) -> Process:
        """
        프로세스 생성 후 큐 끝에 추가

        Raises:
            DuplicateIdError: 지정한 PID가 이미 존재
            ValueError: 잘못된 필드 값
        """
        with self._lock:
            if quantum is None:
                quantum = self.config.default_quantum
            if aging_counter_initial is None:
                aging_counter_initial = self.config.default_aging
            if pid is None:
                pid = self._generate_pid()

            process = Process(pid, name, total_time, quantum, aging_counter_initial,
                              created_at=self.current_tick, state=self._idle_state())
            try:
                self.queue.insert_tail(process)
            except DuplicateIdError as e:
                self.notify('error', str(e))
                raise

            self.log_event(f"P{process.pid} ({process.name}) created → {process.state.value}")
            return process

    def _apply(self, pid: PID, command: str, allowed, action: Callable[[Process], None]) -> Optional[Process]:
        """
        수동 명령 공통 처리: 조회 → 상태 검사 → 변경 → 불변 조건 검사

        Returns:
            변경된 프로세스 (무시된 경우 None)
        """
        with self._lock:
            process = self.queue.find(pid)
            if process is None:
                self._report(ProcessNotFoundError(pid))
                return None
            if allowed is not None and process.state not in allowed:
                self._report(InvalidTransitionError(pid, process.state.value, command))
                return None

            backup = self.queue.copy()
            action(process)
            try:
                self.queue.validate()
            except InvariantViolationError:
                self.queue = backup
                raise

            self.log_event(f"P{process.pid} {command} → {process.state.value}")
            return process

    def suspend(self, pid: PID) -> Optional[Process]:
        """수동 일시정지 (큐 위치 유지)"""
        allowed = (ProcessState.READY, ProcessState.RUNNING, ProcessState.INACTIVE)
        return self._apply(pid, 'suspend', allowed, lambda p: p.suspend())

    def resume(self, pid: PID) -> Optional[Process]:
        """일시정지 해제 (에이징 대기 없이 Ready)"""
        def action(process: Process):
            process.state = self._idle_state()
            process.aging_counter = 0

        allowed = (ProcessState.SUSPENDED, ProcessState.INACTIVE)
        return self._apply(pid, 'resume', allowed, action)

    def terminate(self, pid: PID) -> Optional[Process]:
        """강제 종료"""
        def action(process: Process):
            process.remaining_time = 0
            process.terminate(self.current_tick)

        allowed = (ProcessState.READY, ProcessState.RUNNING, ProcessState.SUSPENDED,
                   ProcessState.INACTIVE)
        return self._apply(pid, 'terminate', allowed, action)

    def restart(self, pid: PID) -> Optional[Process]:
        """생성 시점 상태로 되돌림"""
        return self._apply(pid, 'restart', None, lambda p: p.restart(self._idle_state()))

    def rename(self, pid: PID, new_name: str) -> Optional[Process]:
        """이름 변경 (유일하게 수정 가능한 필드)"""
        new_name = str(new_name).strip()
        if not new_name:
            raise ValueError("프로세스 이름은 비어 있을 수 없습니다")

        def action(process: Process):
            process.name = new_name

        return self._apply(pid, 'rename', None, action)

    def remove(self, pid: PID) -> Optional[Process]:
        """큐에서 삭제"""
        with self._lock:
            try:
                process = self.queue.remove(pid)
            except ProcessNotFoundError as e:
                self._report(e)
                return None
            self.log_event(f"P{process.pid} removed")
            return process

    def reorder(self, from_index: int, to_index: int) -> bool:
        """
        큐 재정렬

        Returns:
            이동했는지 여부 (범위를 벗어나면 무시)
        """
        with self._lock:
            try:
                self.queue.reorder(from_index, to_index)
            except InvalidIndexError as e:
                self.notify('warning', str(e))
                return False
            self.log_event(f"Queue reorder: {from_index} → {to_index}")
            return True

    def archive_completed(self) -> List[Process]:
        """종료된 프로세스를 완료 목록으로 이동"""
        with self._lock:
            finished = self.queue.with_state(ProcessState.TERMINATED)
            for process in finished:
                self.queue.remove(process.pid)
                self.completed.append(process)
            if finished:
                self.log_event(f"Archived: {[p.pid for p in finished]}")
            return finished

    def clear(self):
        """큐/완료 목록/통계 초기화"""
        self.stop()
        with self._lock:
            self.queue.clear()
            self.completed = []
            self.current_tick = 0
            self.notifications.clear()
            self.scheduler.reset()
            self._next_pid = 1

    # ------------------------------------------------------------------
    # 상태 조회 / 스냅샷
    # ------------------------------------------------------------------

    def all_processes(self) -> List[Process]:
        return list(self.queue) + list(self.completed)

    def statistics(self) -> Dict:
        return self.scheduler.stats.calculate_averages(self.all_processes())

    def get_current_snapshot(self) -> Dict:
        """
        현재 시뮬레이션 상태 (API/뷰어용)
        """
        with self._lock:
            running = self.queue.running()
            return {
                'tick': self.current_tick,
                'running': self.running,
                'running_pid': running[0].pid if running else None,
                'queue': self.queue.to_list(),
                'completed': [p.to_dict() for p in self.completed],
                'notifications': list(self.notifications),
                'statistics': self.statistics(),
            }

    def snapshot(self) -> Dict:
        """직렬화 가능한 저장용 스냅샷"""
        with self._lock:
            return {
                'tick': self.current_tick,
                'running': self.running,
                'first_dispatch_done': self.queue.first_dispatch_done,
                'queue': self.queue.to_list(),
                'completed': [p.to_dict() for p in self.completed],
            }

    def load_snapshot(self, data: Dict):
        """스냅샷 복원 (항상 정지 상태로 시작)"""
        queue = ProcessQueue.from_list(data.get('queue', []),
                                       bool(data.get('first_dispatch_done', False)))
        completed = [Process.from_dict(item) for item in data.get('completed', [])]

        self.stop()
        with self._lock:
            for process in queue:
                if process.state != ProcessState.TERMINATED:
                    process.state = ProcessState.INACTIVE
            self.queue = queue
            self.completed = completed
            self.current_tick = int(data.get('tick', 0))
            self.scheduler.reset()
            self._next_pid = 1
            self.log_event(f"Snapshot loaded ({len(queue)} queued, {len(completed)} completed)")
