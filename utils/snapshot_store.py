"""
시뮬레이션 스냅샷 저장/불러오기 (JSON)
"""

import json
import os
from typing import Dict


class SnapshotStore:
    """컨트롤러 스냅샷을 JSON 파일로 보관"""

    def __init__(self, path: str):
        self.path = path

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def save(self, snapshot: Dict):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(snapshot, f, ensure_ascii=False, indent=2)

    def load(self) -> Dict:
        """
        저장된 스냅샷 읽기

        Raises:
            FileNotFoundError: 저장된 파일이 없음
            ValueError: JSON 형식 오류
        """
        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict) or 'queue' not in data:
            raise ValueError(f"잘못된 스냅샷 형식: {self.path}")
        return data
