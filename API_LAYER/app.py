# app.py
import logging
import json
from typing import Any, Dict, Optional, Union

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from configurations.config import DEBUG, PORT
from core.errors import FinCoachError
from services.api_client import HttpDataService
from services.chat_controller import ChatController
from services.token_store import TokenStore


# -----------------------------
# Structured Logging Setup
# -----------------------------
class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(
            {
                "time": self.formatTime(record, self.datefmt),
                "level": record.levelname,
                "name": record.name,
                "message": record.getMessage(),
                "exception": record.exc_text,
            }
        )


logger = logging.getLogger("fincoach_api")
logger.setLevel(logging.INFO)
handler = logging.StreamHandler()
handler.setFormatter(JSONFormatter())
if not logger.handlers:
    logger.addHandler(handler)

# -----------------------------
# FastAPI App
# -----------------------------
app = FastAPI(title="FinCoach Assistant API", version="1.0")

# -----------------------------
# Controller (Lifecycle managed)
# -----------------------------
controller: ChatController | None = None

# -----------------------------
# Pydantic Models
# -----------------------------
class SubmitRequest(BaseModel):
    # None submits whatever voice capture left in the input buffer
    text: Optional[str] = None


class LoginRequest(BaseModel):
    credential: str


class ExpenseRequest(BaseModel):
    title: str = ""
    amount: float = Field(..., gt=0)
    category: str = ""


class GoalRequest(BaseModel):
    title: str
    target: Union[str, float]


class GoalProgressRequest(BaseModel):
    amount: float = Field(500, gt=0)


class GroupRequest(BaseModel):
    name: str


class JoinGroupRequest(BaseModel):
    code: str


class ProfileRequest(BaseModel):
    income: Optional[float] = None
    budgetLimit: Optional[float] = None


# -----------------------------
# Failure envelope
# -----------------------------
def failure(status_code: int, error_type: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"type": error_type, "message": message}},
    )


@app.exception_handler(FinCoachError)
async def fincoach_error_handler(request: Request, exc: FinCoachError):
    logger.warning(f"[ERROR] path={request.url.path}, type={exc.error_type}, detail={exc}")
    return failure(exc.status_code, exc.error_type, str(exc))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return failure(exc.status_code, "http_error", str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"[ERROR] path={request.url.path}, exception={exc}")
    return failure(
        500,
        "internal_error",
        str(exc) if DEBUG else "An unexpected error occurred",
    )


def get_controller() -> ChatController:
    if controller is None:
        raise HTTPException(status_code=503, detail="Assistant not started")
    return controller


def render_state(ctrl: ChatController) -> Dict[str, Any]:
    state = ctrl.state
    snapshot = state.snapshot
    profile = snapshot.profile if snapshot else None
    return {
        "authenticated": state.session.is_authenticated,
        "guest": state.session.is_guest,
        "mood": state.mood.value,
        "voice_state": state.voice_state.value,
        "pending_input": state.pending_input,
        "is_processing": state.is_processing,
        "transcript": [m.model_dump(mode="json") for m in state.transcript],
        "snapshot": snapshot.model_dump(mode="json") if snapshot else None,
        "level": profile.level if profile else None,
        "xp": profile.xp if profile else None,
        "balance": snapshot.balance if snapshot else 0,
        "daily_challenge": (
            snapshot.daily_challenge.model_dump(mode="json")
            if snapshot and snapshot.daily_challenge
            else None
        ),
    }


# -----------------------------
# Startup / Shutdown Events
# -----------------------------
@app.on_event("startup")
async def startup():
    global controller
    # Server side has no microphone; voice toggles report unsupported
    controller = ChatController(HttpDataService(), TokenStore())
    try:
        await controller.startup()
        logger.info("✅ FinCoach controller ready")
    except FinCoachError:
        logger.exception("❌ Failed to restore previous session")
        if DEBUG:
            raise


@app.on_event("shutdown")
async def shutdown():
    if controller is not None:
        await controller.voice.shutdown()
        logger.info("✅ Voice capture shut down")

# -----------------------------
# API Endpoints
# -----------------------------
@app.get("/")
async def root():
    return {"message": "FinCoach Assistant API is running."}


@app.get("/health")
async def health() -> Dict[str, Any]:
    return {
        "status": "ok",
        "controller_ready": controller is not None,
        "authenticated": bool(controller and controller.state.session.is_authenticated),
    }


@app.get("/metrics")
async def metrics() -> Dict[str, Any]:
    return get_controller().metrics.copy()


@app.get("/state")
async def current_state():
    return render_state(get_controller())


@app.post("/login")
async def login(request: LoginRequest):
    ctrl = get_controller()
    await ctrl.login(request.credential)
    return render_state(ctrl)


@app.post("/login/guest")
async def login_guest():
    ctrl = get_controller()
    await ctrl.login_as_guest()
    return render_state(ctrl)


@app.post("/logout")
async def logout():
    ctrl = get_controller()
    await ctrl.logout()
    return render_state(ctrl)


@app.post("/submit")
async def submit(request: SubmitRequest):
    ctrl = get_controller()
    logger.info(f"[REQUEST_START] text_length={len(request.text or '')}")
    reply = await ctrl.submit(request.text)
    return {
        "accepted": reply is not None,
        "reply": reply.model_dump(mode="json") if reply else None,
        "state": render_state(ctrl),
    }


@app.post("/voice/toggle")
async def toggle_voice():
    ctrl = get_controller()
    voice_state = await ctrl.toggle_voice()
    return {"voice_state": voice_state.value}


@app.post("/expenses")
async def add_expense(request: ExpenseRequest):
    ctrl = get_controller()
    reply = await ctrl.add_expense(request.model_dump())
    return {
        "accepted": reply is not None,
        "reply": reply.model_dump(mode="json") if reply else None,
    }


@app.post("/goals")
async def create_goal(request: GoalRequest):
    reply = await get_controller().create_goal(request.title, request.target)
    return {"reply": reply.model_dump(mode="json")}


@app.post("/goals/{goal_id}/progress")
async def add_goal_progress(goal_id: str, request: GoalProgressRequest):
    ctrl = get_controller()
    await ctrl.add_goal_progress(goal_id, request.amount)
    return render_state(ctrl)


@app.post("/groups")
async def create_group(request: GroupRequest):
    ctrl = get_controller()
    await ctrl.create_group(request.name)
    return render_state(ctrl)


@app.post("/groups/join")
async def join_group(request: JoinGroupRequest):
    ctrl = get_controller()
    await ctrl.join_group(request.code)
    return render_state(ctrl)


@app.put("/profile")
async def update_profile(request: ProfileRequest):
    ctrl = get_controller()
    profile = await ctrl.update_profile(request.model_dump(exclude_none=True))
    return {"profile": profile.model_dump(mode="json")}


@app.post("/dashboard/refresh")
async def refresh_dashboard():
    ctrl = get_controller()
    snapshot = await ctrl.refresh_dashboard()
    return {"refreshed": snapshot is not None, "state": render_state(ctrl)}


# -----------------------------
# Entrypoint
# -----------------------------
import uvicorn

if __name__ == "__main__":
    uvicorn.run("API_LAYER.app:app", host="0.0.0.0", port=PORT, workers=1)
