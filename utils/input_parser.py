"""
입력 데이터 파서 및 프로세스 생성 모듈
"""

import random
from typing import Dict, List, Optional

from core.config import DEFAULT_AGING
from core.process import Process


# 빠른 실행 프리셋 (이름, 총 실행 시간, 퀀텀)
QUICK_LAUNCH_PRESETS: List[Dict] = [
    {'name': 'VS Code', 'total_time': 30, 'quantum': 5},
    {'name': 'Photoshop', 'total_time': 35, 'quantum': 7},
    {'name': 'Illustrator', 'total_time': 30, 'quantum': 6},
    {'name': 'Premiere Pro', 'total_time': 40, 'quantum': 8},
    {'name': 'After Effects', 'total_time': 45, 'quantum': 9},
    {'name': 'Google Chrome', 'total_time': 25, 'quantum': 4},
    {'name': 'Firefox', 'total_time': 20, 'quantum': 4},
    {'name': 'Spotify', 'total_time': 20, 'quantum': 3},
    {'name': 'Discord', 'total_time': 25, 'quantum': 4},
    {'name': 'Slack', 'total_time': 15, 'quantum': 3},
    {'name': 'IntelliJ IDEA', 'total_time': 35, 'quantum': 6},
    {'name': 'PyCharm', 'total_time': 30, 'quantum': 5},
    {'name': 'Figma', 'total_time': 25, 'quantum': 5},
    {'name': 'Notion', 'total_time': 15, 'quantum': 3},
    {'name': 'Word', 'total_time': 30, 'quantum': 5},
    {'name': 'Excel', 'total_time': 25, 'quantum': 5},
    {'name': 'Power Point', 'total_time': 35, 'quantum': 7},
]

# 모니터 샘플 변환 기본값
SAMPLE_MIN_TOTAL_TIME = 5
SAMPLE_MAX_QUANTUM = 10


def map_system_sample(sample: Dict, aging_counter_initial: int = DEFAULT_AGING) -> Dict:
    """
    실제 시스템 프로세스 샘플을 create() 인자로 변환

    Args:
        sample: {pid, name?, cpu_usage?, memory?} (memory 단위: 바이트)
        aging_counter_initial: 에이징 기본값

    Returns:
        create()에 전달할 키워드 인자
    """
    if sample.get('pid') is None:
        raise ValueError("샘플에 pid가 없습니다")

    pid = str(sample['pid'])
    name = sample.get('name') or f"proc-{pid}"
    cpu_usage = sample.get('cpu_usage')
    memory = sample.get('memory') or 0

    # CPU 사용률이 있으면 그대로, 없으면 메모리(10MB 단위)로 추정
    if isinstance(cpu_usage, (int, float)) and cpu_usage > 0:
        total_time = max(SAMPLE_MIN_TOTAL_TIME, round(cpu_usage))
    else:
        total_time = max(SAMPLE_MIN_TOTAL_TIME, round(memory / (1024 * 1024 * 10)))

    return {
        'pid': pid,
        'name': name,
        'total_time': total_time,
        'quantum': max(1, min(SAMPLE_MAX_QUANTUM, total_time)),
        'aging_counter_initial': aging_counter_initial,
    }


class InputParser:
    """입력 파일 파서"""

    @staticmethod
    def parse_file(filename: str, default_aging: int = DEFAULT_AGING) -> List[Dict]:
        """
        CSV 파일에서 프로세스 정의 읽기

        파일 형식: 이름,총실행시간,퀀텀,에이징
        예: editor,10,2,3

        Args:
            filename: 입력 파일 경로
            default_aging: 에이징 열이 비어 있을 때 사용할 값

        Returns:
            create() 인자 딕셔너리 리스트
        """
        definitions = []

        try:
            with open(filename, 'r', encoding='utf-8') as f:
                for line in f:
                    line = line.strip()

                    # 주석 및 빈 줄 제거
                    if not line or line.startswith('#'):
                        continue

                    try:
                        parts = [part.strip() for part in line.split(',')]
                        definitions.append(InputParser._definition_from_parts(parts, default_aging))
                    except ValueError as e:
                        print(f"경고: 라인 파싱 실패: {line}")
                        print(f"오류: {e}")
                        continue

            print(f"{filename}에서 {len(definitions)}개의 프로세스를 성공적으로 로드했습니다")
            return definitions

        except FileNotFoundError:
            print(f"오류: 파일 '{filename}'을 찾을 수 없습니다")
            return []

    @staticmethod
    def _definition_from_parts(parts: List[str], default_aging: int = DEFAULT_AGING) -> Dict:
        """파싱된 부분에서 프로세스 정의 생성"""
        if len(parts) < 3:
            raise ValueError(f"잘못된 형식: 3개 이상의 필드가 필요하지만 {len(parts)}개만 있습니다")

        name = parts[0]
        if not name:
            raise ValueError("이름이 비어있습니다")

        # 입력 검증
        try:
            total_time = int(parts[1])
            quantum = int(parts[2])
            aging = int(parts[3]) if len(parts) > 3 and parts[3] else default_aging
        except ValueError as e:
            raise ValueError(f"숫자 필드 변환 오류: {e}")

        if total_time <= 0:
            raise ValueError(f"총 실행 시간은 양수여야 합니다: {total_time}")
        if quantum <= 0:
            raise ValueError(f"퀀텀은 양수여야 합니다: {quantum}")
        if aging < 0:
            raise ValueError(f"에이징 값은 0 이상이어야 합니다: {aging}")

        return {
            'name': name,
            'total_time': total_time,
            'quantum': quantum,
            'aging_counter_initial': aging,
        }

    @staticmethod
    def generate_quantum(priority: int) -> int:
        """
        우선순위 기반 퀀텀 휴리스틱
        우선순위가 높을수록(값이 클수록) 퀀텀이 작아지며 최소 4
        """
        base = 8
        return max(4, round(base * (1 + (10 - priority) / 10)))

    @staticmethod
    def generate_random_processes(num_processes: int = 5,
                                  max_total_time: int = 10,
                                  max_aging: int = 5,
                                  seed: Optional[int] = None) -> List[Dict]:
        """
        랜덤 프로세스 정의 생성

        Args:
            num_processes: 생성할 프로세스 수
            max_total_time: 최대 총 실행 시간
            max_aging: 최대 에이징 값
            seed: 랜덤 시드

        Returns:
            create() 인자 딕셔너리 리스트
        """
        rng = random.Random(seed)
        definitions = []

        for i in range(1, num_processes + 1):
            priority = rng.randint(1, 10)
            definitions.append({
                'name': f"process-{i}",
                'total_time': rng.randint(1, max_total_time),
                'quantum': InputParser.generate_quantum(priority),
                'aging_counter_initial': rng.randint(0, max_aging),
            })

        print(f"{num_processes}개의 랜덤 프로세스를 생성했습니다")
        return definitions

    @staticmethod
    def preset(name: str, aging_counter_initial: int = DEFAULT_AGING) -> Dict:
        """빠른 실행 프리셋 조회 (대소문자 무시)"""
        for item in QUICK_LAUNCH_PRESETS:
            if item['name'].lower() == name.strip().lower():
                return dict(item, aging_counter_initial=aging_counter_initial)
        raise ValueError(f"알 수 없는 프리셋: {name}")

    @staticmethod
    def save_processes_to_file(processes: List[Process], filename: str):
        """
        프로세스 정의를 파일로 저장

        Args:
            processes: 저장할 프로세스 리스트
            filename: 출력 파일 경로
        """
        with open(filename, 'w', encoding='utf-8') as f:
            f.write("# FIFO Aging Scheduler Input Data\n")
            f.write("# Format: Name,TotalTime,Quantum,Aging\n\n")

            for process in processes:
                f.write(f"{process.name},{process.total_time},{process.quantum},"
                        f"{process.aging_counter_initial}\n")

        print(f"{len(processes)}개의 프로세스를 {filename}에 성공적으로 저장했습니다")

    @staticmethod
    def print_process_summary(definitions: List[Dict]):
        """프로세스 정의 요약 출력"""
        print("\n" + "="*70)
        print("프로세스 요약")
        print("="*70)
        print(f"{'이름':<20} {'총 시간':>10} {'퀀텀':>8} {'슬라이스':>10} {'에이징':>8}")
        print("-"*70)

        for d in definitions:
            slice_time = -(-d['total_time'] // d['quantum'])
            print(f"{d['name']:<20} {d['total_time']:>10} {d['quantum']:>8} "
                  f"{slice_time:>10} {d['aging_counter_initial']:>8}")

        print("="*70 + "\n")
        print(f"전체 프로세스: {len(definitions)}개")
        print()
