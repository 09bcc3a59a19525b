import matplotlib

matplotlib.use("Agg")

import pytest

from core.clock import ManualClock
from core.config import SimulationConfig
from core.run_controller import RunController


@pytest.fixture
def controller():
    return RunController(config=SimulationConfig(default_aging=0), clock=ManualClock())
