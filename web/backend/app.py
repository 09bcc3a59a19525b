"""
FIFO 에이징 스케줄러 시뮬레이터 - FastAPI 백엔드
"""

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any, Union
import asyncio
import json

from core.clock import ManualClock
from core.config import SimulationConfig
from core.errors import (DuplicateIdError, InvalidTransitionError,
                         InvariantViolationError, ProcessNotFoundError)
from core.run_controller import RunController
from utils.input_parser import InputParser, QUICK_LAUNCH_PRESETS, map_system_sample

app = FastAPI(
    title="FIFO Aging Scheduler Simulator",
    description="FIFO + 에이징 프로세스 스케줄링 시뮬레이터",
    version="1.0.0"
)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 서버 전체에서 하나의 컨트롤러 사용 (틱은 WebSocket 또는 /simulation/tick으로 구동)
controller = RunController(clock=ManualClock(), raise_errors=True)


# Pydantic 모델
class ProcessInput(BaseModel):
    name: str
    total_time: int = Field(gt=0)
    quantum: Optional[int] = Field(default=None, gt=0)
    aging_counter_initial: Optional[int] = Field(default=None, ge=0)
    pid: Optional[Union[int, str]] = None


class SystemSampleInput(BaseModel):
    pid: Union[int, str]
    name: Optional[str] = None
    cpu_usage: Optional[float] = None
    memory: Optional[int] = None


class RenameInput(BaseModel):
    name: str


class ReorderInput(BaseModel):
    from_index: int
    to_index: int


class ConfigInput(BaseModel):
    tick_interval: float = Field(default=1.0, gt=0)
    default_quantum: int = Field(default=2, ge=1)
    default_aging: int = Field(default=3, ge=0)
    max_ticks: int = Field(default=10000, ge=1)
    auto_archive: bool = False


class SnapshotInput(BaseModel):
    tick: int = 0
    running: bool = False
    first_dispatch_done: bool = False
    queue: List[Dict[str, Any]]
    completed: List[Dict[str, Any]] = []


def run_command(func, *args):
    """컨트롤러 명령 실행 및 오류 → HTTP 상태 코드 변환"""
    try:
        return func(*args)
    except ProcessNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (DuplicateIdError, InvalidTransitionError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InvariantViolationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def state_response(**extra) -> Dict:
    return {'success': True, **extra, 'state': controller.get_current_snapshot()}


@app.get("/")
async def root():
    return {"message": "FIFO Aging Scheduler Simulator API", "version": "1.0.0"}


@app.get("/processes")
async def list_processes():
    """큐의 프로세스 목록"""
    return {"processes": controller.queue.to_list()}


@app.post("/processes")
async def create_process(process: ProcessInput):
    """프로세스 생성"""
    created = run_command(controller.create, process.name, process.total_time,
                          process.quantum, process.aging_counter_initial, process.pid)
    return state_response(process=created.to_dict())


@app.post("/processes/from-sample")
async def create_from_sample(sample: SystemSampleInput):
    """실제 시스템 프로세스 샘플로 생성"""
    kwargs = run_command(map_system_sample, sample.model_dump(),
                         controller.config.default_aging)
    created = run_command(lambda: controller.create(**kwargs))
    return state_response(process=created.to_dict())


@app.post("/processes/preset/{name}")
async def create_from_preset(name: str):
    """빠른 실행 프리셋으로 생성"""
    kwargs = run_command(InputParser.preset, name, controller.config.default_aging)
    created = run_command(lambda: controller.create(**kwargs))
    return state_response(process=created.to_dict())


@app.patch("/processes/{pid}")
async def rename_process(pid: str, body: RenameInput):
    """이름 변경"""
    updated = run_command(controller.rename, pid, body.name)
    return state_response(process=updated.to_dict())


@app.post("/processes/{pid}/{command}")
async def process_command(pid: str, command: str):
    """수동 명령: suspend / resume / terminate / restart"""
    commands = {
        'suspend': controller.suspend,
        'resume': controller.resume,
        'terminate': controller.terminate,
        'restart': controller.restart,
    }
    if command not in commands:
        raise HTTPException(status_code=404, detail=f"Unknown command: {command}")
    updated = run_command(commands[command], pid)
    return state_response(process=updated.to_dict())


@app.delete("/processes/{pid}")
async def delete_process(pid: str):
    """프로세스 삭제"""
    removed = run_command(controller.remove, pid)
    return state_response(process=removed.to_dict())


@app.post("/queue/reorder")
async def reorder_queue(body: ReorderInput):
    """큐 재정렬 (범위를 벗어나면 무시)"""
    moved = controller.reorder(body.from_index, body.to_index)
    return state_response(moved=moved)


@app.post("/simulation/start")
async def start_simulation():
    started = controller.start()
    return state_response(started=started)


@app.post("/simulation/stop")
async def stop_simulation():
    controller.stop()
    return state_response()


@app.post("/simulation/tick")
async def tick_simulation(count: int = 1):
    """틱 수동 실행"""
    if count < 1:
        raise HTTPException(status_code=400, detail="count는 1 이상이어야 합니다")
    for _ in range(count):
        run_command(controller.tick)
    return state_response()


@app.post("/simulation/archive")
async def archive_completed():
    archived = controller.archive_completed()
    return state_response(archived=[p.pid for p in archived])


@app.post("/simulation/clear")
async def clear_simulation():
    controller.clear()
    return state_response()


@app.get("/simulation/state")
async def get_state():
    return controller.get_current_snapshot()


@app.get("/simulation/log")
async def get_event_log(since: int = 0):
    return {"event_log": controller.event_log[since:], "next": len(controller.event_log)}


@app.get("/simulation/gantt")
async def get_gantt_chart():
    return {"gantt_chart": [entry.to_dict() for entry in controller.scheduler.gantt_chart]}


@app.post("/simulation/config")
async def update_config(body: ConfigInput):
    """설정 변경 (정지 상태에서만)"""
    if controller.running:
        raise HTTPException(status_code=409, detail="실행 중에는 설정을 변경할 수 없습니다")
    config = SimulationConfig(
        tick_interval=body.tick_interval,
        default_quantum=body.default_quantum,
        default_aging=body.default_aging,
        max_ticks=body.max_ticks,
        notification_limit=controller.config.notification_limit,
        auto_archive=body.auto_archive,
    )
    controller.config = config
    return {"success": True, "config": config.to_dict()}


@app.get("/snapshot")
async def get_snapshot():
    return controller.snapshot()


@app.put("/snapshot")
async def put_snapshot(body: SnapshotInput):
    """스냅샷 복원"""
    try:
        controller.load_snapshot(body.model_dump())
    except (KeyError, ValueError, InvariantViolationError) as e:
        raise HTTPException(status_code=400, detail=f"잘못된 스냅샷: {e}")
    return state_response()


@app.get("/presets")
async def get_presets():
    """빠른 실행 프리셋 목록"""
    return {"presets": QUICK_LAUNCH_PRESETS}


@app.get("/sample-processes")
async def get_sample_processes():
    """샘플 프로세스 데이터 반환"""
    return {
        "samples": [
            {
                "name": "기본 FIFO (2개 프로세스)",
                "processes": [
                    {"name": "A", "total_time": 4, "quantum": 1, "aging_counter_initial": 0},
                    {"name": "B", "total_time": 4, "quantum": 1, "aging_counter_initial": 0},
                ]
            },
            {
                "name": "슬라이스 + 에이징 (3개 프로세스)",
                "processes": [
                    {"name": "editor", "total_time": 10, "quantum": 2, "aging_counter_initial": 4},
                    {"name": "browser", "total_time": 6, "quantum": 3, "aging_counter_initial": 2},
                    {"name": "shell", "total_time": 3, "quantum": 1, "aging_counter_initial": 1},
                ]
            },
        ]
    }


class RealtimeSession:
    """WebSocket 연결별 새 로그/Gantt 추적"""

    def __init__(self, controller: RunController):
        self.controller = controller
        self.last_gantt_index = 0
        self.last_log_index = 0

    def step(self) -> Dict:
        """한 틱 실행 및 상태 반환"""
        if not self.controller.running:
            self.controller.start()
        if self.controller.running and self.controller.queue.has_active():
            self.controller.tick()
        return self.collect()

    def collect(self) -> Dict:
        scheduler = self.controller.scheduler

        # 새로운 Gantt 엔트리 (마지막 구간은 연장될 수 있으므로 다시 전송)
        start = max(0, self.last_gantt_index - 1)
        new_gantt = [entry.to_dict() for entry in scheduler.gantt_chart[start:]]
        self.last_gantt_index = len(scheduler.gantt_chart)

        # 새로운 로그
        new_logs = scheduler.event_log[self.last_log_index:]
        self.last_log_index = len(scheduler.event_log)

        return {
            'complete': not self.controller.queue.has_active(),
            'new_gantt': new_gantt,
            'new_logs': new_logs,
            **self.controller.get_current_snapshot(),
        }


@app.websocket("/ws/realtime")
async def websocket_realtime(websocket: WebSocket):
    """실시간 시뮬레이션 WebSocket 엔드포인트"""
    await websocket.accept()
    session = RealtimeSession(controller)

    try:
        while True:
            data = await websocket.receive_text()
            message = json.loads(data)

            action = message.get('action')

            if action == 'state':
                await websocket.send_json({'type': 'state', **session.collect()})

            elif action == 'step':
                result = session.step()
                await websocket.send_json({'type': 'step_result', **result})

            elif action == 'run':
                # 자동 실행 (속도 조절 가능)
                speed = message.get('speed', 1.0)
                if isinstance(speed, bool) or not isinstance(speed, (int, float)) or speed <= 0:
                    await websocket.send_json({'type': 'error',
                                               'message': f"speed는 양수여야 합니다: {speed}"})
                    continue
                delay = controller.config.tick_interval / speed
                max_ticks = message.get('max_ticks', controller.config.max_ticks)

                for _ in range(max_ticks):
                    result = session.step()
                    await websocket.send_json({'type': 'step_result', **result})

                    if result['complete']:
                        break

                    await asyncio.sleep(delay)

            elif action == 'stop':
                controller.stop()
                await websocket.send_json({'type': 'state', **session.collect()})

            else:
                await websocket.send_json({'type': 'error', 'message': f"Unknown action: {action}"})

    except WebSocketDisconnect:
        pass
    except (ValueError, InvariantViolationError) as e:
        await websocket.send_json({'type': 'error', 'message': str(e)})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
