import logging
import os
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException  # type: ignore
from pydantic import BaseModel, Field

from propagator import (
    ContractViolationError,
    EpochOrderError,
    InconsistentUpdateError,
    IncrementalController,
    build_sudoku_model,
    solve,
)
from propagator.config import MAX_BOARD_SIZE, MAX_SESSIONS, SUDOKU_SIZE
from propagator.report.render_result import build_result
from propagator.sudoku.parser import grid_to_facts, normalize_grid


# ============================================================
# Configuration & Logging
# ============================================================
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("propagator_web")

SESSION_LIMIT = int(os.getenv("PROPAGATOR_MAX_SESSIONS", str(MAX_SESSIONS)))


# ============================================================
# Session Store (in-memory)
# ============================================================
@dataclass
class Session:
    controller: IncrementalController
    size: int


class SessionStore:
    """
    セッション ID -> Session（コントローラと盤面サイズ）を保持します。

    上限を超えたら、最後に触られたのが一番古いものから捨てます。
    """

    def __init__(self, limit: int = SESSION_LIMIT):
        self.limit = limit
        self.sessions: "OrderedDict[str, Session]" = OrderedDict()

    def create(self, session: Session) -> str:
        session_id = uuid.uuid4().hex
        self.sessions[session_id] = session
        while len(self.sessions) > self.limit:
            dropped, _ = self.sessions.popitem(last=False)
            logger.info("Session evicted: %s", dropped)
        return session_id

    def get(self, session_id: str) -> Session:
        session = self.sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        self.sessions.move_to_end(session_id)
        return session


sessions = SessionStore()


# ============================================================
# FastAPI App
# ============================================================
app = FastAPI()

logger.info("web_app.py loaded. SESSION_LIMIT=%d", SESSION_LIMIT)


# ============================================================
# Pydantic Models
# ============================================================
class SolveRequest(BaseModel):
    board: Any  # 2D array or "53..7...." string


class FactDelta(BaseModel):
    fact: List[int]  # [value, row, col]
    count: int = 1


class LoadRequest(BaseModel):
    board: Optional[Any] = None
    facts: Optional[List[FactDelta]] = None
    size: int = Field(SUDOKU_SIZE, ge=1, le=MAX_BOARD_SIZE)


class Batch(BaseModel):
    outer_round: Optional[int] = None
    delta: List[FactDelta]


class UpdateRequest(BaseModel):
    batches: List[Batch]


class HealthResponse(BaseModel):
    ok: bool


def to_delta(items: List[FactDelta]) -> Dict[tuple, int]:
    delta: Dict[tuple, int] = {}
    for item in items:
        key = tuple(item.fact)
        delta[key] = delta.get(key, 0) + item.count
    return delta


def box_shape(size: int):
    """size に合う、できるだけ正方形に近いボックスの形 (rows, cols)。"""
    rows = int(size ** 0.5)
    while rows > 1 and size % rows:
        rows -= 1
    return rows, size // rows


def summarize(session: Session, result) -> Dict[str, Any]:
    controller = session.controller
    out = build_result(result.snapshot, session.size, report=controller.report())
    out["outer_round"] = result.snapshot.epoch.outer
    out["rounds"] = result.rounds
    out["recomputed"] = result.recomputed
    out["diff"] = [[list(f), c] for f, c in sorted(result.diff.items())]
    out["report_delta"] = {str(k): v for k, v in result.report_delta.items()}
    return out


# ============================================================
# Health
# ============================================================
@app.get("/health", response_model=HealthResponse)
async def health():
    return {"ok": True}


# ============================================================
# API Endpoints
# ============================================================
@app.post("/api/solve")
async def api_solve(request: SolveRequest):
    try:
        return solve(request.board)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/sessions")
async def api_create_session(request: LoadRequest):
    if request.board is None and request.facts is None:
        raise HTTPException(status_code=400, detail="Provide either board or facts")

    try:
        box_rows, box_cols = box_shape(request.size)
        model = build_sudoku_model(size=request.size, box_rows=box_rows, box_cols=box_cols)
        if request.board is not None:
            facts: Any = grid_to_facts(normalize_grid(request.board, request.size))
        else:
            facts = to_delta(request.facts or [])

        controller = IncrementalController(model)
        result = controller.load(facts)
    except (ValueError, ContractViolationError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    session = Session(controller=controller, size=request.size)
    session_id = sessions.create(session)
    logger.info("Session created: %s (size=%d)", session_id, request.size)

    out = summarize(session, result)
    out["session_id"] = session_id
    return out


@app.post("/api/sessions/{session_id}/updates")
async def api_update_session(session_id: str, request: UpdateRequest):
    session = sessions.get(session_id)
    applied: List[Dict[str, Any]] = []

    for batch in request.batches:
        try:
            result = session.controller.update(
                to_delta(batch.delta), outer_round=batch.outer_round
            )
        except (InconsistentUpdateError, EpochOrderError) as e:
            # 失敗したバッチは適用されず、それ以前のバッチは適用済みのまま
            logger.warning("Update rejected for %s: %s", session_id, e)
            raise HTTPException(
                status_code=409,
                detail={"error": str(e), "applied": len(applied)},
            )
        except ContractViolationError as e:
            raise HTTPException(
                status_code=422,
                detail={"error": str(e), "applied": len(applied)},
            )
        applied.append(summarize(session, result))

    return {"session_id": session_id, "results": applied}


@app.get("/api/sessions/{session_id}")
async def api_query_session(session_id: str):
    session = sessions.get(session_id)
    out = summarize(session, session.controller.last_result)
    out["session_id"] = session_id
    return out


@app.get("/api/sessions/{session_id}/snapshot")
async def api_session_snapshot(session_id: str):
    session = sessions.get(session_id)
    return session.controller.snapshot.to_records()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.web_app:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )
