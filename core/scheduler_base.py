"""
스케줄러 기본 프레임워크 및 이벤트 관리
"""

from typing import List, Dict, Optional
from dataclasses import dataclass, asdict
from .process import Process, ProcessState, PID, pid_key
from .queue_store import ProcessQueue

IDLE_PID = -1  # Gantt Chart의 CPU 유휴 구간


@dataclass
class GanttEntry:
    """Gantt Chart 엔트리"""
    pid: PID
    start_time: int
    end_time: int
    state: ProcessState  # Running 또는 유휴(Ready)

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['state'] = self.state.value
        return data


class SchedulerStats:
    """스케줄링 통계"""

    def __init__(self):
        self.context_switches = 0
        self.cpu_busy_time = 0
        self.idle_time = 0
        self.total_simulation_time = 0

    def calculate_averages(self, processes: List[Process]) -> Dict:
        """종료된 프로세스 기준 평균 계산"""
        finished = [p for p in processes if p.is_terminated()]
        cpu_utilization = (self.cpu_busy_time / self.total_simulation_time * 100) \
            if self.total_simulation_time > 0 else 0

        if not finished:
            return {
                'avg_waiting_time': 0,
                'avg_turnaround_time': 0,
                'avg_response_time': 0,
                'cpu_utilization': cpu_utilization,
                'context_switches': self.context_switches,
                'completed': 0,
            }

        responded = [p for p in finished if p.response_time is not None]
        return {
            'avg_waiting_time': sum(p.wait_time for p in finished) / len(finished),
            'avg_turnaround_time': sum(p.turnaround_time for p in finished) / len(finished),
            'avg_response_time': (sum(p.response_time for p in responded) / len(responded))
                                 if responded else 0,
            'cpu_utilization': cpu_utilization,
            'context_switches': self.context_switches,
            'completed': len(finished),
        }


class BaseScheduler:
    """
    기본 스케줄러 클래스
    틱 단위 스케줄러의 공통 기능 (이벤트 로그, Gantt Chart, 통계) 제공
    """

    def __init__(self, name: str = "Base Scheduler"):
        self.name = name
        self.current_time = 0
        self.previous_pid: Optional[PID] = None  # 마지막으로 디스패치된 프로세스

        # Gantt Chart 데이터
        self.gantt_chart: List[GanttEntry] = []

        # 통계
        self.stats = SchedulerStats()

        # 이벤트 로그
        self.event_log: List[str] = []

    def log_event(self, message: str):
        """이벤트 로그 기록"""
        log_entry = f"[T={self.current_time:3d}] {message}"
        self.event_log.append(log_entry)

    def record_tick(self, pid: PID, tick: int):
        """한 틱의 실행 기록 (같은 PID가 연속되면 구간 연장)"""
        state = ProcessState.READY if pid == IDLE_PID else ProcessState.RUNNING
        if self.gantt_chart:
            last = self.gantt_chart[-1]
            if pid_key(last.pid) == pid_key(pid) and last.end_time == tick:
                last.end_time = tick + 1
                return
        self.gantt_chart.append(GanttEntry(pid, tick, tick + 1, state))

    def context_switch(self, process: Process, tick: int):
        """
        디스패치 수행

        Args:
            process: 새로 실행할 프로세스
            tick: start_time으로 기록할 틱 인덱스
        """
        if self.previous_pid is not None and pid_key(self.previous_pid) != pid_key(process.pid):
            self.stats.context_switches += 1
            self.log_event(f"Context Switch: P{self.previous_pid} → P{process.pid}")

        process.dispatch(tick)
        self.previous_pid = process.pid
        self.log_event(f"P{process.pid} → Running")

    def checkpoint(self) -> tuple:
        """틱 시작 전 기록 상태 저장"""
        last = self.gantt_chart[-1].end_time if self.gantt_chart else None
        return (len(self.event_log), len(self.gantt_chart), last,
                dict(vars(self.stats)), self.previous_pid, self.current_time)

    def rollback(self, saved: tuple):
        """중단된 틱의 기록 되돌리기"""
        log_len, gantt_len, last_end, stats, previous_pid, current_time = saved
        del self.event_log[log_len:]
        del self.gantt_chart[gantt_len:]
        if last_end is not None:
            self.gantt_chart[-1].end_time = last_end
        vars(self.stats).update(stats)
        self.previous_pid = previous_pid
        self.current_time = current_time

    def reset(self):
        """통계/로그 초기화 (큐를 비울 때)"""
        self.current_time = 0
        self.previous_pid = None
        self.gantt_chart = []
        self.stats = SchedulerStats()
        self.event_log = []

    def select_next_process(self, queue: ProcessQueue) -> Optional[Process]:
        """
        다음 실행할 프로세스 선택 (하위 클래스에서 구현)

        Returns:
            선택된 프로세스 또는 None
        """
        raise NotImplementedError("Subclasses must implement select_next_process()")

    def advance(self, queue: ProcessQueue, tick_index: int) -> ProcessQueue:
        """
        한 틱 진행 (하위 클래스에서 구현)

        Returns:
            다음 상태의 큐
        """
        raise NotImplementedError("Subclasses must implement advance()")
