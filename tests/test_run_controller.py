import threading
import time

import pytest

from core.clock import IntervalClock, ManualClock
from core.config import SimulationConfig
from core.errors import DuplicateIdError, InvalidTransitionError, ProcessNotFoundError
from core.process import ProcessState
from core.run_controller import RunController


def test_created_state_depends_on_run_state(controller):
    a = controller.create("A", total_time=3, quantum=1)
    assert a.state == ProcessState.INACTIVE
    assert a.created_at == 0

    controller.start()
    controller.tick()
    b = controller.create("B", total_time=3, quantum=1)
    assert b.state == ProcessState.READY
    assert b.created_at == 1
    assert [p.pid for p in controller.queue] == [1, 2]


def test_create_uses_config_defaults(controller):
    p = controller.create("A", total_time=6)
    assert p.quantum == controller.config.default_quantum
    assert p.aging_counter_initial == controller.config.default_aging


def test_auto_pid_skips_taken_ids(controller):
    controller.create("explicit", total_time=1, pid=2)
    assert controller.create("first", total_time=1).pid == 1
    assert controller.create("second", total_time=1).pid == 3


def test_duplicate_pid_is_rejected_and_reported(controller):
    controller.create("A", total_time=1, pid=7)
    with pytest.raises(DuplicateIdError):
        controller.create("B", total_time=1, pid="7")
    assert len(controller.queue) == 1
    assert controller.notifications[0]['level'] == 'error'


def test_start_with_nothing_to_run_is_noop(controller):
    assert controller.start() is False
    assert controller.running is False
    assert controller.notifications[0]['level'] == 'info'


def test_start_twice_keeps_single_running(controller):
    controller.create("A", total_time=5, quantum=1)
    controller.create("B", total_time=5, quantum=1)
    assert controller.start()
    assert controller.start()
    assert len(controller.queue.running()) == 1


def test_stop_forces_inactive_and_restart_resumes_fifo(controller):
    controller.create("A", total_time=5, quantum=1)
    controller.create("B", total_time=1, quantum=1)
    controller.start()
    controller.tick()

    controller.stop()
    assert all(p.state == ProcessState.INACTIVE for p in controller.queue)
    assert controller.clock.fire() == 0

    before = controller.queue.to_list()
    controller.tick()
    assert controller.queue.to_list() == before

    controller.start()
    running = controller.queue.running()
    assert len(running) == 1 and running[0].name == "A"
    assert running[0].remaining_time == 4


def test_clock_drives_ticks_only_while_running(controller):
    controller.create("A", total_time=3, quantum=1)
    controller.start()
    assert controller.clock.fire(3) == 3
    assert controller.queue.find(1).state == ProcessState.TERMINATED
    assert controller.current_tick == 3


def test_manual_suspend_keeps_position_and_counts_rotation(controller):
    controller.create("A", total_time=5, quantum=1, aging_counter_initial=2)
    controller.create("B", total_time=5, quantum=1)
    controller.start()

    p = controller.suspend(1)
    assert p.state == ProcessState.SUSPENDED
    assert p.aging_counter == 2
    assert p.iteration_count == 1
    assert [q.name for q in controller.queue] == ["A", "B"]

    controller.tick()
    assert controller.queue.find(2).state == ProcessState.RUNNING


def test_resume_skips_aging(controller):
    controller.create("A", total_time=5, quantum=1, aging_counter_initial=9)
    controller.start()
    controller.suspend(1)

    p = controller.resume(1)
    assert p.state == ProcessState.READY
    assert p.aging_counter == 0


def test_invalid_transition_is_reported_not_raised(controller):
    controller.create("A", total_time=5, quantum=1)
    controller.start()

    assert controller.resume(1) is None
    assert controller.notifications[0]['level'] == 'warning'
    assert controller.queue.find(1).state == ProcessState.RUNNING


def test_missing_pid_is_a_noop_notification(controller):
    assert controller.suspend(99) is None
    assert controller.remove(99) is None
    assert "99" in controller.notifications[0]['message']


def test_raise_errors_surfaces_user_errors():
    ctrl = RunController(clock=ManualClock(), raise_errors=True)
    with pytest.raises(ProcessNotFoundError):
        ctrl.terminate(1)
    ctrl.create("A", total_time=2, quantum=1)
    ctrl.terminate(1)
    with pytest.raises(InvalidTransitionError):
        ctrl.terminate(1)


def test_terminate_running_frees_the_cpu(controller):
    controller.create("A", total_time=5, quantum=1)
    controller.create("B", total_time=5, quantum=1)
    controller.start()
    controller.tick()

    p = controller.terminate(1)
    assert p.state == ProcessState.TERMINATED
    assert p.remaining_time == 0
    assert p.progress == 100
    assert p.end_time == 1
    assert p.iteration_count == 1

    controller.tick()
    assert controller.queue.find(2).state == ProcessState.RUNNING
    assert controller.terminate(1) is None


def test_restart_returns_terminated_record_to_ready(controller):
    controller.create("A", total_time=2, quantum=1)
    controller.run_until_idle()
    assert controller.queue.find(1).state == ProcessState.TERMINATED

    p = controller.restart(1)
    assert p.state == ProcessState.READY
    assert p.remaining_time == 2
    assert p.end_time is None and p.start_time is None
    assert p.iteration_count == 0

    controller.tick()
    p = controller.queue.find(1)
    assert p.state == ProcessState.RUNNING
    assert p.start_time == 2


def test_rename_is_the_only_edit(controller):
    controller.create("old", total_time=2)
    assert controller.rename(1, "  new  ").name == "new"
    with pytest.raises(ValueError):
        controller.rename(1, "   ")


def test_reorder_out_of_range_is_ignored(controller):
    for name in "ABC":
        controller.create(name, total_time=2)
    assert controller.reorder(2, 0) is True
    assert [p.name for p in controller.queue] == ["C", "A", "B"]

    assert controller.reorder(0, 5) is False
    assert [p.name for p in controller.queue] == ["C", "A", "B"]


def test_remove_running_record_vacates_slot(controller):
    controller.create("A", total_time=5, quantum=1)
    controller.create("B", total_time=5, quantum=1)
    controller.start()
    assert controller.remove(1).name == "A"

    controller.tick()
    assert controller.queue.find(2).state == ProcessState.RUNNING


def test_notifications_are_bounded(controller):
    for pid in range(10):
        controller.suspend(pid)
    assert len(controller.notifications) == controller.config.notification_limit
    assert "9" in controller.notifications[0]['message']


def test_archive_moves_terminated_records(controller):
    controller.create("A", total_time=1, quantum=1)
    controller.create("B", total_time=3, quantum=1)
    controller.start()
    controller.tick()

    archived = controller.archive_completed()
    assert [p.name for p in archived] == ["A"]
    assert [p.name for p in controller.queue] == ["B"]
    assert [p.name for p in controller.completed] == ["A"]
    assert controller.create("C", total_time=1).pid == 3


def test_auto_archive_after_each_tick():
    ctrl = RunController(config=SimulationConfig(auto_archive=True), clock=ManualClock())
    ctrl.create("A", total_time=1, quantum=1)
    ctrl.run_until_idle()
    assert len(ctrl.queue) == 0
    assert ctrl.statistics()['completed'] == 1


def test_snapshot_round_trip_starts_stopped(controller):
    controller.create("A", total_time=4, quantum=2, aging_counter_initial=1)
    controller.create("B", total_time=1, quantum=1)
    controller.start()
    controller.tick()
    controller.tick()
    data = controller.snapshot()

    restored = RunController(clock=ManualClock())
    restored.load_snapshot(data)

    assert restored.current_tick == 2
    assert restored.running is False
    assert restored.queue.first_dispatch_done is True
    assert [p.to_dict()['remaining_time'] for p in restored.queue] == \
        [p['remaining_time'] for p in data['queue']]
    assert all(p.state in (ProcessState.INACTIVE, ProcessState.TERMINATED) for p in restored.queue)
    assert restored.create("C", total_time=1).pid == 3


def test_run_until_idle_respects_tick_limit(controller):
    controller.create("A", total_time=50, quantum=1)
    assert controller.run_until_idle(max_ticks=10) == 10
    assert "WARNING: Simulation timeout" in controller.event_log[-1]


def test_event_log_uses_tick_prefix(controller):
    controller.create("A", total_time=1, quantum=1)
    controller.run_until_idle()
    assert any(line.startswith("[T=  0] P1 → Running") for line in controller.event_log)
    assert any("P1 → Terminated" in line for line in controller.event_log)


def test_interval_clock_ticks_controller_in_background():
    done = threading.Event()
    ctrl = RunController(config=SimulationConfig(tick_interval=0.01),
                         clock=IntervalClock(0.01))
    ctrl.create("A", total_time=3, quantum=1)

    def watch():
        while ctrl.queue.has_active():
            time.sleep(0.005)
        done.set()

    ctrl.start()
    threading.Thread(target=watch, daemon=True).start()
    assert done.wait(timeout=5)
    ctrl.stop()

    assert ctrl.queue.find(1).state == ProcessState.TERMINATED
    assert not ctrl.clock.is_running


def test_tick_while_stopped_leaves_suspended_record_alone(controller):
    controller.create("A", total_time=5, quantum=1)
    controller.suspend(1)

    queue = controller.tick()

    p = queue.find(1)
    assert p.state == ProcessState.SUSPENDED
    assert p.aging_counter == 0
    assert controller.current_tick == 0
    assert controller.running is False
    assert controller.scheduler.gantt_chart == []


def test_start_with_only_suspended_records_is_noop(controller):
    controller.create("A", total_time=5, quantum=1, aging_counter_initial=2)
    controller.suspend(1)

    assert controller.start() is False
    assert controller.running is False
    assert controller.clock.fire() == 0
    assert controller.queue.find(1).state == ProcessState.SUSPENDED
    assert controller.notifications[0]['level'] == 'info'

    controller.resume(1)
    assert controller.start() is True
    assert controller.queue.find(1).state == ProcessState.RUNNING


def test_emptying_queue_rearms_pid_tie_break(controller):
    controller.create("A", total_time=1, quantum=1)
    controller.run_until_idle()
    controller.stop()
    controller.archive_completed()
    assert len(controller.queue) == 0

    controller.create("late", total_time=2, quantum=1, pid=9)
    controller.create("early", total_time=2, quantum=1, pid=4)
    controller.start()
    assert controller.queue.find(4).state == ProcessState.RUNNING
