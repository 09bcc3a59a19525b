"""
시각화 모듈: Gantt Chart 및 통계 출력
"""

import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
from typing import List, Dict
from core.process import Process
from core.scheduler_base import GanttEntry, IDLE_PID


class Visualizer:
    """스케줄링 결과 시각화"""

    def __init__(self):
        # 프로세스별 색상 설정
        self.colors = plt.cm.Set3.colors
        self.idle_color = '#CCCCCC'

    def _color_for(self, pid, order: Dict) -> tuple:
        return self.colors[order[str(pid)] % len(self.colors)]

    def draw_gantt_chart(self, gantt_data: List[GanttEntry], title: str,
                         save_path: str = None, show: bool = True):
        """
        Gantt Chart 그리기

        Args:
            gantt_data: Gantt Chart 데이터
            title: 차트 제목
            save_path: 저장 경로 (None이면 저장 안 함)
            show: 화면에 표시할지 여부
        """
        if not gantt_data:
            print(f"{title}에 대한 Gantt 차트 데이터가 없습니다")
            return

        fig, ax = plt.subplots(figsize=(16, 6))

        # 프로세스 ID 추출 (처음 실행된 순서)
        pids = []
        for entry in gantt_data:
            if entry.pid != IDLE_PID and str(entry.pid) not in pids:
                pids.append(str(entry.pid))
        pid_to_y = {pid: idx for idx, pid in enumerate(pids)}

        for entry in gantt_data:
            duration = entry.end_time - entry.start_time
            if entry.pid == IDLE_PID:
                # CPU 유휴 시간은 축 아래 회색 띠로 표시
                ax.barh(-1, duration, left=entry.start_time, height=0.4,
                        color=self.idle_color, edgecolor='black', linewidth=0.5)
                continue

            y_pos = pid_to_y[str(entry.pid)]
            ax.barh(y_pos, duration, left=entry.start_time, height=0.8,
                    color=self._color_for(entry.pid, pid_to_y), edgecolor='black', linewidth=0.5)

            if duration > 1:  # 충분히 긴 경우만 텍스트 표시
                ax.text(entry.start_time + duration / 2, y_pos, f'P{entry.pid}',
                        ha='center', va='center', fontsize=8, fontweight='bold')

        # 축 설정
        ax.set_yticks([-1] + list(range(len(pids))))
        ax.set_yticklabels(['Idle'] + [f'P{pid}' for pid in pids])
        ax.set_xlabel('Tick', fontsize=12)
        ax.set_ylabel('Process', fontsize=12)
        ax.set_title(f'Gantt Chart - {title}', fontsize=14, fontweight='bold')
        ax.grid(axis='x', alpha=0.3)

        legend_elements = [
            mpatches.Patch(color=self.colors[0], label='Running'),
            mpatches.Patch(color=self.idle_color, label='Idle'),
        ]
        ax.legend(handles=legend_elements, loc='upper right')

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Gantt 차트가 {save_path}에 저장되었습니다")

        if show:
            plt.show()
        else:
            plt.close(fig)

    def print_process_table(self, processes: List[Process]):
        """프로세스 상세 정보 출력"""
        print(f"\n{'='*110}")
        print("프로세스 상세")
        print(f"{'='*110}")
        print(f"{'PID':<8} {'이름':<16} {'상태':<11} {'총':>4} {'남음':>5} {'퀀텀':>5} "
              f"{'회전':>5} {'진행률':>7} {'시작':>6} {'종료':>6} {'대기':>6}")
        print(f"{'-'*110}")

        def show(value):
            return '-' if value is None else value

        for p in processes:
            print(f"{str(p.pid):<8} {p.name:<16} {p.state.value:<11} {p.total_time:>4} "
                  f"{p.remaining_time:>5} {p.quantum:>5} {p.iteration_count:>5} "
                  f"{str(p.progress) + '%':>7} {show(p.start_time):>6} {show(p.end_time):>6} "
                  f"{p.wait_time:>6}")

        print(f"{'='*110}\n")

    def print_statistics(self, stats: Dict, total_ticks: int = None):
        """
        통계 요약 출력

        Args:
            stats: SchedulerStats.calculate_averages() 결과
            total_ticks: 총 실행 틱 수
        """
        print("\n" + "="*60)
        print("시뮬레이션 통계")
        print("="*60)
        if total_ticks is not None:
            print(f"{'총 틱':<20} {total_ticks:>12}")
        print(f"{'완료 프로세스':<20} {stats['completed']:>12}")
        print(f"{'평균 대기 시간':<20} {stats['avg_waiting_time']:>12.2f}")
        print(f"{'평균 반환 시간':<20} {stats['avg_turnaround_time']:>12.2f}")
        print(f"{'평균 응답 시간':<20} {stats['avg_response_time']:>12.2f}")
        print(f"{'CPU 이용률(%)':<20} {stats['cpu_utilization']:>12.2f}")
        print(f"{'문맥 교환':<20} {stats['context_switches']:>12}")
        print("="*60 + "\n")
