from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from fastapi.responses import RedirectResponse

from core.api import APIResponse, ValidationResponse, build_api_response, build_validation_response
from core.models import DialogueState
from core.runtime.graph_info import load_and_validate
from core.runtime.player import DialoguePlayer
from dialogue.preprocess import DialogueGraphDoc, doc_to_graph
from dialogue.schema import ChoiceId, DialogueGraph
from dialogue.validator import validate_dialogue
from storage.session_store import SessionStore
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DIALOGUE_GRAPH = os.getenv("DIALOGUE_GRAPH")
TWO_PASS = bool(int(os.getenv("DIALOGUE_TWO_PASS", "1")))
SESSION_TTL = int(os.getenv("DIALOGUE_SESSION_TTL", "3600"))


class StartSessionReq(BaseModel):
    session_id: Optional[str] = None


class ChooseReq(BaseModel):
    choice_id: int


class DialogueApp:
    """Holds the active dialogue and its playback sessions"""

    def __init__(self, dialogue: Optional[DialogueGraph] = None, two_pass: bool = True, session_ttl: int = 3600):
        self.two_pass = two_pass
        self.dialogue = dialogue
        self.sessions = SessionStore(session_ttl=session_ttl)

    def player(self) -> DialoguePlayer:
        if self.dialogue is None:
            raise HTTPException(status_code=409, detail="no dialogue loaded")
        return DialoguePlayer(self.dialogue)

    def load_session(self, session_id: str) -> DialogueState:
        state = self.sessions.load_state(session_id)
        if state is None:
            raise HTTPException(status_code=404, detail=f"session not found: {session_id}")
        return state

    def respond(self, player: DialoguePlayer, state: DialogueState) -> APIResponse:
        self.sessions.save_state(state.session_id, state)
        node = None if state.is_complete else player.current(state)
        return build_api_response(state, node)


def create_app(
    dialogue: Optional[DialogueGraph] = None,
    two_pass: bool = TWO_PASS,
    session_ttl: int = SESSION_TTL,
) -> FastAPI:
    runtime = DialogueApp(dialogue=dialogue, two_pass=two_pass, session_ttl=session_ttl)
    app = FastAPI(title="Dialogue Graph Builder API")
    app.state.runtime = runtime

    @app.get("/", include_in_schema=False)
    def root() -> RedirectResponse:
        return RedirectResponse(url="/docs")

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"ok": True, "dialogue_loaded": runtime.dialogue is not None}

    @app.post("/validate", response_model=ValidationResponse)
    def validate(body: DialogueGraphDoc, two_pass: bool = runtime.two_pass) -> ValidationResponse:
        report = validate_dialogue(doc_to_graph(body), two_pass=two_pass)
        return build_validation_response(report)

    @app.put("/dialogue", response_model=ValidationResponse)
    def put_dialogue(body: DialogueGraphDoc) -> ValidationResponse:
        dialogue = doc_to_graph(body)
        report = validate_dialogue(dialogue, two_pass=runtime.two_pass)
        runtime.dialogue = dialogue
        logger.info(f"Dialogue replaced: {len(dialogue)} nodes (valid={report.ok})")
        return build_validation_response(report)

    @app.post("/sessions", response_model=APIResponse)
    def start_session(body: StartSessionReq) -> APIResponse:
        player = runtime.player()
        try:
            state = player.start(session_id=body.session_id)
        except ValueError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return runtime.respond(player, state)

    @app.get("/sessions/{session_id}", response_model=APIResponse)
    def get_session(session_id: str) -> APIResponse:
        player = runtime.player()
        state = runtime.load_session(session_id)
        node = None
        if not state.is_complete:
            node = _current_or_409(player, state)
        return build_api_response(state, node)

    @app.post("/sessions/{session_id}/progress", response_model=APIResponse)
    def progress(session_id: str) -> APIResponse:
        player = runtime.player()
        state = runtime.load_session(session_id)
        try:
            state = player.progress(state)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except KeyError as e:
            raise HTTPException(status_code=409, detail=f"current node no longer exists: {e}")
        return runtime.respond(player, state)

    @app.post("/sessions/{session_id}/choices", response_model=APIResponse)
    def choose(session_id: str, body: ChooseReq) -> APIResponse:
        player = runtime.player()
        state = runtime.load_session(session_id)
        try:
            state = player.choose(state, ChoiceId(body.choice_id))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except KeyError as e:
            raise HTTPException(status_code=409, detail=f"current node no longer exists: {e}")
        return runtime.respond(player, state)

    @app.delete("/sessions/{session_id}")
    def delete_session(session_id: str) -> Dict[str, Any]:
        if not runtime.sessions.delete_state(session_id):
            raise HTTPException(status_code=404, detail=f"session not found: {session_id}")
        return {"ok": True}

    return app


def _current_or_409(player: DialoguePlayer, state: DialogueState):
    try:
        return player.current(state)
    except KeyError as e:
        raise HTTPException(status_code=409, detail=f"current node no longer exists: {e}")


def _load_default_dialogue() -> Optional[DialogueGraph]:
    if not DIALOGUE_GRAPH:
        return None
    graph_info = load_and_validate(DIALOGUE_GRAPH, two_pass=TWO_PASS)
    if not graph_info.report.ok:
        logger.warning(f"Dialogue {DIALOGUE_GRAPH} has structural issues; serving it anyway")
    return graph_info.dialogue


app = create_app(_load_default_dialogue())
