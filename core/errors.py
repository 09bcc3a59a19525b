"""
시뮬레이터 예외 정의
"""


class SchedulerError(Exception):
    """시뮬레이터 예외의 기본 클래스"""


class DuplicateIdError(SchedulerError, ValueError):
    """이미 큐에 존재하는 PID로 프로세스를 생성하려 할 때"""

    def __init__(self, pid):
        super().__init__(f"PID {pid}는 이미 큐에 존재합니다")
        self.pid = pid


class ProcessNotFoundError(SchedulerError, KeyError):
    """존재하지 않는 PID를 참조하는 명령"""

    def __init__(self, pid):
        super().__init__(f"PID {pid}를 찾을 수 없습니다")
        self.pid = pid

    def __str__(self):
        return self.args[0]


class InvalidIndexError(SchedulerError, IndexError):
    """범위를 벗어난 재정렬 인덱스"""

    def __init__(self, from_index: int, to_index: int, size: int):
        super().__init__(f"잘못된 인덱스: {from_index} → {to_index} (큐 크기 {size})")
        self.from_index = from_index
        self.to_index = to_index


class InvalidTransitionError(SchedulerError):
    """현재 상태에서 허용되지 않는 수동 명령"""

    def __init__(self, pid, state, command: str):
        super().__init__(f"P{pid}: {state} 상태에서는 {command} 불가")
        self.pid = pid
        self.command = command


class InvariantViolationError(SchedulerError, AssertionError):
    """엔진 내부 논리 오류 (틱 중단, 변경 사항 반영 안 함)"""
