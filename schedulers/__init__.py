"""
CPU Scheduling Algorithms
"""

from .fifo_aging import FIFOAgingScheduler

__all__ = [
    'FIFOAgingScheduler',
]
