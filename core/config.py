"""
시뮬레이션 설정
"""

from dataclasses import dataclass, asdict
from typing import Dict

# 기본값 (시간 단위: 틱)
TICK_INTERVAL = 1.0  # 초
DEFAULT_QUANTUM = 2
DEFAULT_AGING = 3
MAX_TICKS = 10000  # 무한 루프 방지
NOTIFICATION_LIMIT = 3


@dataclass
class SimulationConfig:
    """시뮬레이션 실행 설정"""
    tick_interval: float = TICK_INTERVAL
    default_quantum: int = DEFAULT_QUANTUM
    default_aging: int = DEFAULT_AGING
    max_ticks: int = MAX_TICKS
    notification_limit: int = NOTIFICATION_LIMIT
    auto_archive: bool = False

    def __post_init__(self):
        if self.tick_interval <= 0:
            raise ValueError(f"틱 주기는 양수여야 합니다: {self.tick_interval}")
        if self.default_quantum < 1:
            raise ValueError(f"기본 퀀텀은 1 이상이어야 합니다: {self.default_quantum}")
        if self.default_aging < 0:
            raise ValueError(f"기본 에이징 값은 0 이상이어야 합니다: {self.default_aging}")
        if self.max_ticks < 1:
            raise ValueError(f"최대 틱 수는 1 이상이어야 합니다: {self.max_ticks}")
        if self.notification_limit < 1:
            raise ValueError("알림 개수 제한은 1 이상이어야 합니다")

    def to_dict(self) -> Dict:
        return asdict(self)
