"""
FIFO + 에이징 스케줄러 (틱 엔진)
- 먼저 큐에 들어온 Ready 프로세스를 먼저 실행
- 슬라이스(total_time / quantum)를 모두 쓰면 일시정지 후 큐 끝으로 이동
- 일시정지된 프로세스는 에이징 카운터가 0이 되면 Ready로 복귀
"""

from typing import List, Optional
from core.errors import InvariantViolationError
from core.process import Process, ProcessState, pid_sort_key
from core.queue_store import ProcessQueue
from core.scheduler_base import BaseScheduler, IDLE_PID


class FIFOAgingScheduler(BaseScheduler):
    """
    FIFO 에이징 스케줄러
    advance()는 입력 큐를 변경하지 않고 다음 상태의 큐를 반환한다
    """

    def __init__(self):
        super().__init__("FIFO with Aging")

    def select_next_process(self, queue: ProcessQueue) -> Optional[Process]:
        """
        다음 실행할 프로세스 선택

        실행 전체에서 첫 디스패치만 PID 오름차순, 이후에는 큐 순서 (FIFO)
        """
        ready = queue.with_state(ProcessState.READY)
        if not ready:
            return None

        if not queue.first_dispatch_done:
            return min(ready, key=lambda p: pid_sort_key(p.pid))

        # Ready 큐의 첫 번째 프로세스 선택 (FIFO)
        return ready[0]

    def dispatch_next(self, queue: ProcessQueue, tick: int) -> Optional[Process]:
        """Ready 프로세스 하나를 Running으로 전환 (큐를 직접 변경)"""
        if queue.running():
            return None

        process = self.select_next_process(queue)
        if process is not None:
            queue.first_dispatch_done = True
            self.context_switch(process, tick)
        return process

    def age_suspended(self, queue: ProcessQueue):
        """일시정지된 프로세스의 에이징 카운터 감소"""
        for process in queue.with_state(ProcessState.SUSPENDED):
            if process.aging_counter > 0:
                process.aging_counter -= 1

    def promote_aged(self, queue: ProcessQueue) -> List[Process]:
        """에이징이 끝난 프로세스를 원래 순서대로 큐 끝에 Ready로 추가"""
        promoted = [p for p in queue.with_state(ProcessState.SUSPENDED)
                    if p.aging_counter <= 0]
        for process in promoted:
            process.state = ProcessState.READY
            process.aging_counter = 0
            queue.move_to_tail(process)
            self.log_event(f"P{process.pid} aging complete → Ready Queue")
        return promoted

    def account_wait(self, queue: ProcessQueue, active: Process):
        """실행 중이 아닌 Ready/Suspended 프로세스의 대기 시간 증가"""
        for process in queue:
            if process is active:
                continue
            if process.state in (ProcessState.READY, ProcessState.SUSPENDED):
                process.wait_time += 1

    def advance(self, queue: ProcessQueue, tick_index: int) -> ProcessQueue:
        """
        한 틱 진행

        Args:
            queue: 현재 큐 (변경되지 않음)
            tick_index: 현재 틱 인덱스

        Returns:
            다음 상태의 큐 (처리할 프로세스가 없으면 입력 큐 그대로)
        """
        if not queue.has_active():
            return queue

        running = queue.running()
        if len(running) > 1:
            raise InvariantViolationError(
                f"Running 프로세스가 {len(running)}개: {[p.pid for p in running]}")

        saved = self.checkpoint()
        self.current_time = tick_index
        work = queue.copy()

        try:
            # 1. 에이징
            self.age_suspended(work)

            # 2. Ready 복귀
            self.promote_aged(work)

            # 3. 실행 중인 프로세스가 없으면 새 프로세스 선택
            active = work.running()[0] if running else self.dispatch_next(work, tick_index)

            if active is None:
                # CPU 유휴 상태
                self.stats.idle_time += 1
                self.record_tick(IDLE_PID, tick_index)
            else:
                # 4. CPU 실행
                finished = active.execute(1)
                self.stats.cpu_busy_time += 1
                self.record_tick(active.pid, tick_index)

                # 5. 대기 시간
                self.account_wait(work, active)

                if finished:
                    # 6. 종료 (end_time은 실행 완료 시점)
                    active.terminate(tick_index + 1)
                    self.log_event(f"P{active.pid} → Terminated "
                                   f"(WT={active.wait_time}, TT={active.turnaround_time})")
                elif active.cpu_ticks_in_slice >= active.slice_time:
                    # 7. 슬라이스 소진 → 일시정지, 큐 끝으로
                    slice_used = active.cpu_ticks_in_slice
                    active.suspend()
                    work.move_to_tail(active)
                    self.log_event(f"P{active.pid} slice {slice_used}/{active.slice_time} used "
                                   f"→ Suspended (aging={active.aging_counter})")

                # 8. 같은 틱 안에서 즉시 재디스패치 (다음 틱부터 실행)
                if active.state != ProcessState.RUNNING:
                    self.dispatch_next(work, tick_index + 1)

            self.stats.total_simulation_time += 1
            work.validate()
        except Exception:
            self.rollback(saved)
            raise

        return work
