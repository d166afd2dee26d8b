"""
FastAPI server for Friction Scope.

Provides REST endpoints that let a browser host drive tracking sessions and
query stored results. Each session gets its own SessionController; the
server only keeps a registry of them.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from reporting import (
    build_prompt_payload,
    build_screening_report,
    generate_llm_prompt,
    generate_local_assessment,
)
from scoring import AGE_BASELINES, DEFAULT_AGE_GROUP
from session import SessionController
from utils.config_loader import get_nested_config, load_config
from utils.session_store import SessionStore

logger = logging.getLogger(__name__)


class StartSessionRequest(BaseModel):
    age_group: str = DEFAULT_AGE_GROUP
    age: Optional[int] = None
    target: Optional[str] = None
    learner_id: Optional[str] = None
    task_type: Optional[str] = None
    start_timestamp_ms: Optional[float] = Field(
        default=None,
        description=(
            "Session start on the same clock as event timestamps. Omit only "
            "when events carry wall-clock epoch milliseconds."
        ),
    )


class EventBatch(BaseModel):
    events: List[Dict[str, Any]] = Field(default_factory=list)


class StopSessionRequest(BaseModel):
    stop_timestamp_ms: Optional[float] = None


def create_app(config: Optional[Dict] = None, store: Optional[SessionStore] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        config: Configuration dict
        store: Optional result store; without one, results are not persisted

    Returns:
        FastAPI application
    """
    app = FastAPI(
        title="Friction Scope API",
        description="REST API for pointer interaction friction sessions",
        version="1.0.0"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_nested_config(config, 'api.cors_origins', []),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    sessions: Dict[str, Dict[str, Any]] = {}

    def _get_session(session_id: str) -> Dict[str, Any]:
        entry = sessions.get(session_id)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
        return entry

    def _require_store() -> SessionStore:
        if store is None:
            raise HTTPException(status_code=503, detail="Result storage is not configured")
        return store

    @app.get("/")
    async def root():
        """API root endpoint."""
        return {
            "message": "Friction Scope API",
            "version": "1.0.0",
            "endpoints": [
                "/age-groups",
                "/sessions",
                "/sessions/{session_id}/events",
                "/sessions/{session_id}/live",
                "/sessions/{session_id}/stop",
                "/sessions/{session_id}/prompt",
                "/results",
                "/statistics"
            ]
        }

    @app.get("/age-groups")
    async def get_age_groups() -> Dict:
        """Available age groups and their baselines."""
        return {
            "default": DEFAULT_AGE_GROUP,
            "baselines": {key: baseline.to_dict() for key, baseline in AGE_BASELINES.items()}
        }

    @app.post("/sessions")
    async def start_session(request: StartSessionRequest) -> Dict:
        """Create a controller and start tracking."""
        session_id = f"session_{uuid.uuid4().hex[:12]}"
        controller = SessionController(age_group=request.age_group, config=config)
        controller.start(request.target, request.start_timestamp_ms)

        sessions[session_id] = {
            "controller": controller,
            "learner_id": request.learner_id,
            "task_type": request.task_type,
            "age": request.age,
        }

        logger.info(f"API session started: {session_id}")
        return {
            "session_id": session_id,
            "age_group": controller.age_group,
            "state": controller.state.value
        }

    @app.post("/sessions/{session_id}/events")
    async def post_events(session_id: str, batch: EventBatch) -> Dict:
        """Dispatch a batch of pointer events, in order."""
        controller = _get_session(session_id)["controller"]
        accepted = sum(1 for event in batch.events if controller.dispatch(event))
        return {
            "accepted": accepted,
            "dropped": len(batch.events) - accepted,
            "state": controller.state.value
        }

    @app.get("/sessions/{session_id}/live")
    async def get_live(session_id: str) -> Dict:
        """Live snapshot of the session so far."""
        controller = _get_session(session_id)["controller"]
        return controller.live_snapshot().to_dict()

    @app.post("/sessions/{session_id}/stop")
    async def stop_session(session_id: str, request: Optional[StopSessionRequest] = None) -> Dict:
        """Stop tracking, persist and return the final result."""
        entry = _get_session(session_id)
        controller = entry["controller"]
        was_tracking = controller.is_tracking

        stop_ts = request.stop_timestamp_ms if request is not None else None
        result = controller.stop(stop_ts)

        if was_tracking and store is not None:
            try:
                store.save_result(
                    session_id,
                    result,
                    learner_id=entry["learner_id"],
                    task_type=entry["task_type"]
                )
            except Exception as e:
                logger.error(f"Failed to persist session {session_id}: {e}")

        return result.to_dict()

    @app.post("/sessions/{session_id}/reset")
    async def reset_session(session_id: str) -> Dict:
        """Clear buffers and cached results."""
        controller = _get_session(session_id)["controller"]
        controller.reset()
        return {"session_id": session_id, "state": controller.state.value}

    @app.delete("/sessions/{session_id}")
    async def delete_session(session_id: str) -> Dict:
        """Close the controller and drop the session from the registry."""
        entry = _get_session(session_id)
        entry["controller"].close()
        sessions.pop(session_id, None)
        logger.info(f"API session deleted: {session_id}")
        return {"session_id": session_id, "deleted": True}

    @app.get("/sessions/{session_id}/prompt")
    async def get_prompt(session_id: str) -> Dict:
        """Prompt data for the generative-text service, plus offline fallback."""
        entry = _get_session(session_id)
        controller = entry["controller"]
        result = controller.last_result or controller.live_snapshot()

        task_type = entry["task_type"] or "reading_comprehension"
        learner_id = entry["learner_id"] or "learner_01"
        return {
            "payload": build_prompt_payload(result, task_type, learner_id, config),
            "prompt": generate_llm_prompt(result, task_type, learner_id, config, entry["age"]),
            "screening": build_screening_report(result, entry["age"]),
            "local_assessment": generate_local_assessment(result, config)
        }

    @app.get("/results")
    async def list_results(limit: int = 100, offset: int = 0) -> List[Dict]:
        """List stored session results."""
        return _require_store().list_results(limit=limit, offset=offset)

    @app.get("/results/{session_id}")
    async def get_result(session_id: str) -> Dict:
        """Get one stored session result."""
        result = _require_store().get_result(session_id)
        if result is None:
            raise HTTPException(status_code=404, detail=f"Result {session_id} not found")
        return result.to_dict()

    @app.get("/statistics")
    async def get_statistics() -> Dict:
        """Aggregate statistics over stored results."""
        return _require_store().get_statistics()

    return app


def start_server(config_path: Optional[str] = None, host: Optional[str] = None, port: Optional[int] = None):
    """
    Start the API server.

    Args:
        config_path: Optional YAML configuration path
        host: Host address (default from config)
        port: Port number (default from config)
    """
    config = load_config(config_path)
    store = SessionStore(get_nested_config(config, 'storage.db_path', 'data/results/friction_scope.db'))
    app = create_app(config, store)

    host = host or get_nested_config(config, 'api.host', '127.0.0.1')
    port = port or int(get_nested_config(config, 'api.port', 8000))

    logger.info(f"Starting Friction Scope API server at http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    start_server()
