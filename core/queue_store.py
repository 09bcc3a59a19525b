"""
프로세스 큐 (FIFO) 관리 모듈
"""

from typing import Dict, Iterator, List, Optional

from .errors import DuplicateIdError, InvalidIndexError, InvariantViolationError, ProcessNotFoundError
from .process import PID, Process, ProcessState, create_process_copy, pid_key


class ProcessQueue:
    """
    프로세스 레코드의 순서 있는 컬렉션
    삽입 순서를 유지하며, 수동 재정렬과 삭제를 지원
    """

    def __init__(self, processes: Optional[List[Process]] = None):
        self.processes: List[Process] = []
        # 첫 디스패치(PID 오름차순) 규칙이 이미 적용되었는지 여부
        self.first_dispatch_done = False

        for process in processes or []:
            self.insert_tail(process)

    def __len__(self) -> int:
        return len(self.processes)

    def __iter__(self) -> Iterator[Process]:
        return iter(self.processes)

    def __getitem__(self, index: int) -> Process:
        return self.processes[index]

    def insert_tail(self, process: Process):
        """큐 끝에 추가 (중복 PID 거부)"""
        if self.find(process.pid) is not None:
            raise DuplicateIdError(process.pid)
        self.processes.append(process)

    def find(self, pid: PID) -> Optional[Process]:
        key = pid_key(pid)
        for process in self.processes:
            if pid_key(process.pid) == key:
                return process
        return None

    def get(self, pid: PID) -> Process:
        """find()와 같지만 없으면 ProcessNotFoundError"""
        process = self.find(pid)
        if process is None:
            raise ProcessNotFoundError(pid)
        return process

    def index_of(self, pid: PID) -> int:
        key = pid_key(pid)
        for idx, process in enumerate(self.processes):
            if pid_key(process.pid) == key:
                return idx
        raise ProcessNotFoundError(pid)

    def remove(self, pid: PID) -> Process:
        """PID로 삭제 후 삭제된 레코드 반환 (큐가 비면 첫 디스패치 플래그 초기화)"""
        process = self.processes.pop(self.index_of(pid))
        if not self.processes:
            self.first_dispatch_done = False
        return process

    def move_to_tail(self, process: Process):
        self.processes.remove(process)
        self.processes.append(process)

    def reorder(self, from_index: int, to_index: int):
        """from_index의 요소를 to_index 위치로 이동 (배열 이동)"""
        size = len(self.processes)
        if not (0 <= from_index < size and 0 <= to_index < size):
            raise InvalidIndexError(from_index, to_index, size)
        if from_index == to_index:
            return
        process = self.processes.pop(from_index)
        self.processes.insert(to_index, process)

    def running(self) -> List[Process]:
        return [p for p in self.processes if p.state == ProcessState.RUNNING]

    def with_state(self, state: ProcessState) -> List[Process]:
        return [p for p in self.processes if p.state == state]

    def has_active(self) -> bool:
        """Ready/Running/Suspended 레코드가 하나라도 있는지"""
        return any(p.is_active() for p in self.processes)

    def pids(self) -> List[PID]:
        return [p.pid for p in self.processes]

    def clear(self):
        """큐 비우기 (첫 디스패치 플래그도 초기화)"""
        self.processes.clear()
        self.first_dispatch_done = False

    def copy(self) -> 'ProcessQueue':
        """레코드까지 깊은 복사"""
        clone = ProcessQueue()
        clone.processes = [create_process_copy(p) for p in self.processes]
        clone.first_dispatch_done = self.first_dispatch_done
        return clone

    def validate(self):
        """큐 전체 불변 조건 검사"""
        keys = [pid_key(p.pid) for p in self.processes]
        if len(keys) != len(set(keys)):
            raise InvariantViolationError(f"중복 PID: {keys}")

        running = self.running()
        if len(running) > 1:
            raise InvariantViolationError(
                f"Running 프로세스가 {len(running)}개: {[p.pid for p in running]}")

        for process in self.processes:
            process.validate()

    def to_list(self) -> List[Dict]:
        return [p.to_dict() for p in self.processes]

    @classmethod
    def from_list(cls, items: List[Dict], first_dispatch_done: bool = False) -> 'ProcessQueue':
        queue = cls([Process.from_dict(item) for item in items])
        queue.first_dispatch_done = first_dispatch_done
        queue.validate()
        return queue

    def __repr__(self):
        return f"ProcessQueue({self.processes})"
