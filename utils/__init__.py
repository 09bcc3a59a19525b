"""
Utility modules
"""

from .input_parser import InputParser, QUICK_LAUNCH_PRESETS, map_system_sample
from .snapshot_store import SnapshotStore
from .visualization import Visualizer

__all__ = ['InputParser', 'QUICK_LAUNCH_PRESETS', 'map_system_sample', 'SnapshotStore', 'Visualizer']
