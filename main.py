#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FIFO 에이징 스케줄러 시뮬레이터 - 메인 실행 파일
"""

import sys
import os
import time

from core.clock import IntervalClock, ManualClock
from core.config import SimulationConfig
from core.errors import SchedulerError
from core.run_controller import RunController
from utils.input_parser import InputParser, QUICK_LAUNCH_PRESETS
from utils.snapshot_store import SnapshotStore
from utils.visualization import Visualizer


def print_banner():
    """배너 출력"""
    print("\n" + "="*80)
    print(" "*22 + "FIFO 에이징 프로세스 스케줄러 시뮬레이터")
    print("="*80 + "\n")


def select_input_source():
    """입력 선택"""
    print("\n" + "="*80)
    print("입력 선택")
    print("="*80)

    script_dir = os.path.dirname(os.path.abspath(__file__))
    sample_file = os.path.join(script_dir, "data", "sample_processes.txt")

    print("\n[입력 옵션]")
    print("  0. 샘플 데이터 - sample_processes.txt")
    print("  1. 랜덤 데이터 (자동 생성)")
    print("  2. 빠른 실행 프리셋")
    print("  3. 저장된 스냅샷 불러오기")
    print("="*80)

    while True:
        choice = input("\n입력 옵션 선택 (0-3): ").strip()

        if choice == '0':
            if os.path.exists(sample_file):
                return 'file', sample_file
            print(f"[오류] 샘플 데이터를 찾을 수 없습니다: {sample_file}")

        elif choice == '1':
            return 'random', None

        elif choice == '2':
            print("\n" + "-"*80)
            for i, item in enumerate(QUICK_LAUNCH_PRESETS, 1):
                print(f"  {i:>2}. {item['name']:<16} (총 {item['total_time']}, 퀀텀 {item['quantum']})")
            print("-"*80)
            picked = input("프리셋 번호 (쉼표로 여러 개): ").strip()
            try:
                indices = [int(x) - 1 for x in picked.split(',') if x.strip()]
            except ValueError:
                print("[오류] 잘못된 입력입니다.")
                continue
            if indices and all(0 <= idx < len(QUICK_LAUNCH_PRESETS) for idx in indices):
                return 'presets', [QUICK_LAUNCH_PRESETS[idx]['name'] for idx in indices]
            print("[오류] 잘못된 프리셋 번호입니다.")

        elif choice == '3':
            path = input("스냅샷 파일 경로: ").strip()
            if os.path.exists(path):
                return 'snapshot', path
            print(f"[오류] 파일을 찾을 수 없습니다: {path}")

        else:
            print("[오류] 잘못된 선택입니다. 0-3 중에서 입력하세요.")


def load_controller(source: str, value, config: SimulationConfig, clock=None) -> RunController:
    """입력 소스에서 프로세스를 불러와 컨트롤러 생성"""
    controller = RunController(config=config, clock=clock or ManualClock())

    if source == 'snapshot':
        controller.load_snapshot(SnapshotStore(value).load())
        return controller

    if source == 'file':
        definitions = InputParser.parse_file(value, config.default_aging)
    elif source == 'random':
        definitions = InputParser.generate_random_processes(num_processes=5)
    elif source == 'presets':
        definitions = [InputParser.preset(name, config.default_aging) for name in value]
    else:
        raise ValueError(f"알 수 없는 입력 소스: {source}")

    InputParser.print_process_summary(definitions)
    for definition in definitions:
        controller.create(**definition)
    return controller


def run_simulation(controller: RunController, verbose: bool = True) -> int:
    """끝날 때까지 실행 후 결과 출력"""
    ticks = controller.run_until_idle()

    if verbose:
        for log in controller.event_log:
            print(log)

    visualizer = Visualizer()
    visualizer.print_process_table(controller.all_processes())
    visualizer.print_statistics(controller.statistics(), ticks)
    return ticks


def run_realtime(controller: RunController):
    """실시간 모드: 틱 주기마다 상태 출력"""
    printed = 0
    if not controller.start():
        print("[오류] 실행할 프로세스가 없습니다.")
        return

    try:
        while controller.queue.has_active():
            time.sleep(controller.config.tick_interval / 2)
            new_logs = controller.event_log[printed:]
            printed += len(new_logs)
            for log in new_logs:
                print(log)
    finally:
        controller.stop()

    Visualizer().print_statistics(controller.statistics(), controller.current_tick)


def save_results(controller: RunController, output_dir: str = "simulation_results"):
    """결과 저장 (Gantt 차트, 스냅샷)"""
    os.makedirs(output_dir, exist_ok=True)

    gantt_path = os.path.join(output_dir, "gantt_fifo_aging.png")
    Visualizer().draw_gantt_chart(controller.scheduler.gantt_chart, controller.scheduler.name,
                                  save_path=gantt_path, show=False)

    snapshot_path = os.path.join(output_dir, "snapshot.json")
    SnapshotStore(snapshot_path).save(controller.snapshot())

    print(f"\n결과가 '{output_dir}/' 디렉토리에 저장되었습니다:")
    print("  - Gantt 차트: gantt_fifo_aging.png")
    print("  - 스냅샷: snapshot.json")


def main():
    """메인 함수"""
    print_banner()
    config = SimulationConfig()

    while True:
        source, value = select_input_source()

        realtime = input("\n실시간 모드로 실행하시겠습니까? (y/n, 기본값=n): ").strip().lower() == 'y'
        clock = IntervalClock(config.tick_interval) if realtime else None

        try:
            controller = load_controller(source, value, config, clock)
        except (ValueError, OSError, SchedulerError) as e:
            print(f"[오류] 입력을 불러오지 못했습니다: {e}")
            continue

        if not len(controller.queue):
            print("\n[오류] 프로세스가 없습니다.")
            continue

        if realtime:
            run_realtime(controller)
        else:
            run_simulation(controller, verbose=True)

        if input("결과를 저장하시겠습니까? (y/n): ").strip().lower() == 'y':
            save_results(controller)

        # 계속 여부 확인
        print("\n" + "="*80)
        continue_choice = input("다른 시뮬레이션을 실행하시겠습니까? (y/n): ").strip().lower()
        if continue_choice != 'y':
            print("\n시뮬레이터를 사용해 주셔서 감사합니다!")
            print("="*80 + "\n")
            break


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\n사용자에 의해 시뮬레이션이 중단되었습니다.")
        print("="*80 + "\n")
        sys.exit(0)
