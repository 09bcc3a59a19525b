"""
프로세스 및 PCB (Process Control Block) 관리 모듈
"""

from enum import Enum
from typing import Dict, Optional, Union
from copy import deepcopy

from .errors import InvariantViolationError

PID = Union[int, str]


class ProcessState(Enum):
    """프로세스 상태"""
    READY = "Ready"
    RUNNING = "Running"
    SUSPENDED = "Suspended"
    TERMINATED = "Terminated"
    INACTIVE = "Inactive"  # 시뮬레이션 정지 중에 생성됨


def pid_key(pid: PID) -> str:
    """PID 비교용 키 (3과 "3"은 같은 PID)"""
    return str(pid)


def pid_sort_key(pid: PID):
    """숫자 PID 오름차순, 숫자가 아닌 PID는 그 뒤에 문자열 순"""
    text = str(pid)
    if text.lstrip('-').isdigit():
        return (0, int(text), text)
    return (1, 0, text)


def ceil_div(a: int, b: int) -> int:
    return -(-a // b)


class Process:
    """
    프로세스 제어 블록 (PCB)
    시뮬레이션되는 프로세스 하나의 스케줄링 정보를 관리
    """

    def __init__(self, pid: PID, name: str, total_time: int, quantum: int,
                 aging_counter_initial: int = 0, created_at: int = 0,
                 state: ProcessState = ProcessState.READY):
        """
        프로세스 초기화

        Args:
            pid: 프로세스 ID (생성 후 변경 불가)
            name: 표시 이름
            total_time: 필요한 총 작업량 (틱)
            quantum: 완료까지 허용된 회전 수 (틱 수가 아님)
            aging_counter_initial: 일시정지 후 Ready로 돌아가기까지의 틱 수
            created_at: 생성 시점의 틱 인덱스
            state: 초기 상태 (Ready 또는 Inactive)
        """
        if not str(name).strip():
            raise ValueError("프로세스 이름은 비어 있을 수 없습니다")
        if total_time < 1:
            raise ValueError(f"총 실행 시간은 양수여야 합니다: {total_time}")
        if quantum < 1:
            raise ValueError(f"퀀텀은 1 이상이어야 합니다: {quantum}")
        if aging_counter_initial < 0:
            raise ValueError(f"에이징 값은 0 이상이어야 합니다: {aging_counter_initial}")

        self.pid = pid
        self.name = str(name).strip()
        self.total_time = total_time
        self.quantum = quantum
        self.aging_counter_initial = aging_counter_initial
        self.created_at = created_at

        # 실행 상태 추적
        self.state = state
        self.remaining_time = total_time
        self.cpu_ticks_in_slice = 0  # 현재 실행 구간에서 사용한 틱
        self.iteration_count = 0  # 완료된 회전 수
        self.aging_counter = 0
        self.resident = True

        # 통계 정보
        self.wait_time = 0
        self.start_time: Optional[int] = None  # 첫 실행 시간
        self.end_time: Optional[int] = None  # 완료 시간

    @property
    def slice_time(self) -> int:
        """선점 전까지 연속 실행 가능한 최대 틱 수"""
        return max(1, ceil_div(self.total_time, self.quantum))

    @property
    def progress(self) -> int:
        """진행률 (0~100, 반올림)"""
        done = self.total_time - self.remaining_time
        return (200 * done + self.total_time) // (2 * self.total_time)

    @property
    def turnaround_time(self) -> Optional[int]:
        if self.end_time is None:
            return None
        return self.end_time - self.created_at

    @property
    def response_time(self) -> Optional[int]:
        if self.start_time is None:
            return None
        return self.start_time - self.created_at

    def is_active(self) -> bool:
        """틱 엔진이 처리할 상태인지 확인"""
        return self.state in (ProcessState.READY, ProcessState.RUNNING,
                              ProcessState.SUSPENDED)

    def is_terminated(self) -> bool:
        return self.state == ProcessState.TERMINATED

    def execute(self, time_units: int = 1) -> bool:
        """
        프로세스 실행 (남은 시간 감소)

        Returns:
            작업이 완료되었는지 여부
        """
        if self.state != ProcessState.RUNNING:
            raise InvariantViolationError(
                f"P{self.pid}: Running이 아닌 상태({self.state.value})에서 실행 시도")

        self.cpu_ticks_in_slice += time_units
        self.remaining_time = max(0, self.remaining_time - time_units)
        return self.remaining_time == 0

    def dispatch(self, tick: int):
        """Ready → Running"""
        self.state = ProcessState.RUNNING
        self.cpu_ticks_in_slice = 0
        if self.start_time is None:
            self.start_time = tick

    def suspend(self):
        """일시정지 (회전 1회 완료, 에이징 카운터 복원)"""
        self.state = ProcessState.SUSPENDED
        self.cpu_ticks_in_slice = 0
        self.aging_counter = self.aging_counter_initial
        self.iteration_count += 1

    def terminate(self, tick: int):
        """종료 처리 (end_time은 한 번만 설정)"""
        self.state = ProcessState.TERMINATED
        if self.end_time is None:
            self.end_time = tick
        self.resident = False
        self.cpu_ticks_in_slice = 0
        self.iteration_count += 1

    def restart(self, state: ProcessState = ProcessState.READY):
        """생성 시점 값으로 카운터 초기화 (pid/name/total_time/quantum 유지)"""
        self.state = state
        self.remaining_time = self.total_time
        self.cpu_ticks_in_slice = 0
        self.iteration_count = 0
        self.aging_counter = 0
        self.resident = True
        self.wait_time = 0
        self.start_time = None
        self.end_time = None

    def validate(self):
        """불변 조건 검사"""
        if not 0 <= self.remaining_time <= self.total_time:
            raise InvariantViolationError(
                f"P{self.pid}: remaining_time={self.remaining_time} (total={self.total_time})")
        if self.quantum < 1:
            raise InvariantViolationError(f"P{self.pid}: quantum={self.quantum}")
        if self.cpu_ticks_in_slice < 0 or self.iteration_count < 0 or self.wait_time < 0:
            raise InvariantViolationError(f"P{self.pid}: 음수 카운터")
        if (self.end_time is not None) != self.is_terminated():
            raise InvariantViolationError(
                f"P{self.pid}: end_time={self.end_time}, state={self.state.value}")
        if self.state == ProcessState.RUNNING and self.start_time is None:
            raise InvariantViolationError(f"P{self.pid}: Running이지만 start_time 없음")

    def to_dict(self) -> Dict:
        """직렬화 가능한 딕셔너리로 변환"""
        return {
            'pid': self.pid,
            'name': self.name,
            'total_time': self.total_time,
            'remaining_time': self.remaining_time,
            'quantum': self.quantum,
            'slice_time': self.slice_time,
            'cpu_ticks_in_slice': self.cpu_ticks_in_slice,
            'iteration_count': self.iteration_count,
            'state': self.state.value,
            'progress': self.progress,
            'aging_counter': self.aging_counter,
            'aging_counter_initial': self.aging_counter_initial,
            'wait_time': self.wait_time,
            'created_at': self.created_at,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'resident': self.resident,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Process':
        """to_dict() 결과에서 복원 (파생 필드는 무시)"""
        process = cls(
            pid=data['pid'],
            name=data['name'],
            total_time=int(data['total_time']),
            quantum=int(data['quantum']),
            aging_counter_initial=int(data.get('aging_counter_initial', 0)),
            created_at=int(data.get('created_at', 0)),
            state=ProcessState(data.get('state', ProcessState.READY.value)),
        )
        process.remaining_time = int(data.get('remaining_time', process.total_time))
        process.cpu_ticks_in_slice = int(data.get('cpu_ticks_in_slice', 0))
        process.iteration_count = int(data.get('iteration_count', 0))
        process.aging_counter = int(data.get('aging_counter', 0))
        process.wait_time = int(data.get('wait_time', 0))
        process.start_time = data.get('start_time')
        process.end_time = data.get('end_time')
        process.resident = bool(data.get('resident', not process.is_terminated()))
        process.validate()
        return process

    def __repr__(self):
        return f"P{self.pid}[{self.state.value}]"

    def __str__(self):
        return f"Process {self.pid} ({self.name}): State={self.state.value}, " \
               f"Remaining={self.remaining_time}/{self.total_time}, Progress={self.progress}%"


def create_process_copy(process: Process) -> Process:
    """
    프로세스의 깊은 복사본 생성
    틱 중간 상태가 호출자의 큐에 드러나지 않도록 하기 위함
    """
    return deepcopy(process)
