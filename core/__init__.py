"""
Core modules for FIFO Aging Scheduler Simulator
"""

from .errors import (SchedulerError, DuplicateIdError, ProcessNotFoundError,
                     InvalidIndexError, InvalidTransitionError, InvariantViolationError)
from .process import Process, ProcessState, create_process_copy
from .queue_store import ProcessQueue
from .scheduler_base import BaseScheduler, SchedulerStats, GanttEntry
from .config import SimulationConfig
from .clock import IntervalClock, ManualClock
from .run_controller import RunController

__all__ = [
    'SchedulerError',
    'DuplicateIdError',
    'ProcessNotFoundError',
    'InvalidIndexError',
    'InvalidTransitionError',
    'InvariantViolationError',
    'Process',
    'ProcessState',
    'create_process_copy',
    'ProcessQueue',
    'BaseScheduler',
    'SchedulerStats',
    'GanttEntry',
    'SimulationConfig',
    'IntervalClock',
    'ManualClock',
    'RunController',
]
