from __future__ import annotations
import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Annotated, List, Literal, Optional, Set

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field, ValidationError

from formcoach import config
from formcoach.counter.exercises import EXERCISES, HoldConfig
from formcoach.counter.landmarks import NUM_LANDMARKS, Frame, Landmark
from formcoach.common.events import EventType
from formcoach.counter import session

logger = logging.getLogger(__name__)

WS_CLIENTS: Set[WebSocket] = set()
_LOOP: Optional[asyncio.AbstractEventLoop] = None
# pending broadcasts, held until done so they are not collected mid-send
_PENDING: Set[asyncio.Task] = set()


class LandmarkIn(BaseModel):
    x: float
    y: float
    visibility: Optional[float] = None


class FrameIn(BaseModel):
    type: Literal["frame"] = "frame"
    ts: Optional[float] = Field(None, description="Capture time in seconds; server clock when omitted")
    landmarks: Optional[Annotated[List[LandmarkIn], Field(min_length=NUM_LANDMARKS, max_length=NUM_LANDMARKS)]] = Field(
        None, description="All pose landmarks, or null when nobody was detected",
    )

    def to_frame(self, now: float) -> Optional[Frame]:
        if self.landmarks is None:
            return None
        ts = self.ts if self.ts is not None else now
        return Frame(landmarks=tuple(Landmark(p.x, p.y, p.visibility) for p in self.landmarks), ts=ts)


async def broadcast(obj: dict):
    dead = []
    for ws in list(WS_CLIENTS):
        try:
            await ws.send_json(obj)
        except (WebSocketDisconnect, RuntimeError):
            dead.append(ws)
    for d in dead:
        WS_CLIENTS.discard(d)


# let the manager emit snapshots and traces to all WS clients
def _sink(ev: dict):
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None
    if loop is not None:
        task = loop.create_task(broadcast(ev))
        _PENDING.add(task)
        task.add_done_callback(_PENDING.discard)
    elif _LOOP is not None and _LOOP.is_running():
        # called from the camera thread
        asyncio.run_coroutine_threadsafe(broadcast(ev), _LOOP)


def ACTIVE_MANAGER() -> session.RepSessionManager:
    m = session.ACTIVE_MANAGER()
    m.set_event_sink(_sink)
    return m


async def _ticker(interval: float):
    while True:
        await asyncio.sleep(interval)
        ACTIVE_MANAGER().tick()


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _LOOP
    _LOOP = asyncio.get_running_loop()
    task = asyncio.create_task(_ticker(config.TICK_S))
    try:
        yield
    finally:
        task.cancel()
        _LOOP = None


app = FastAPI(lifespan=lifespan)


@app.get("/favicon.ico")
async def favicon():
    return Response(status_code=204)


@app.get("/exercises")
async def exercises():
    return [{"id": k, "timed": isinstance(v, HoldConfig)} for k, v in EXERCISES.items()]


@app.get("/sessions/current")
async def current():
    return JSONResponse(ACTIVE_MANAGER().snapshot().to_event())


@app.post("/exercise/select")
async def select_exercise(exercise: str):
    snap = ACTIVE_MANAGER().select_exercise(exercise)
    return snap.to_event()


@app.post("/exercise/clear")
async def clear_exercise():
    return ACTIVE_MANAGER().select_exercise(None).to_event()


@app.post("/session/start")
async def start(countdown: Optional[int] = None):
    return ACTIVE_MANAGER().start(countdown_s=countdown).to_event()


@app.post("/session/end")
async def end():
    return asdict(ACTIVE_MANAGER().end())


@app.post("/session/reset")
async def reset():
    return ACTIVE_MANAGER().reset().to_event()


@app.get("/session/summary")
async def summary():
    return asdict(ACTIVE_MANAGER().summary())


@app.websocket("/ws/frames")
async def ws_frames(ws: WebSocket):
    await ws.accept()
    WS_CLIENTS.add(ws)
    logger.info("frame client connected (%d open)", len(WS_CLIENTS))
    m = ACTIVE_MANAGER()
    await broadcast({"type": EventType.TRACE.value, "msg": "ws: client connected"})
    try:
        while True:
            raw = await ws.receive_text()
            try:
                msg = FrameIn.model_validate_json(raw)
            except ValidationError as e:
                await ws.send_json({"type": EventType.TRACE.value, "msg": f"bad frame: {e.error_count()} error(s)"})
                continue
            m.handle_frame(msg.to_frame(now=m.clock()))
    except WebSocketDisconnect:
        pass
    finally:
        WS_CLIENTS.discard(ws)
        await broadcast({"type": EventType.TRACE.value, "msg": "ws closed"})


def serve():
    import uvicorn

    config.setup_logging()
    uvicorn.run("formcoach.runtime.server:app", host="0.0.0.0", port=8000)
