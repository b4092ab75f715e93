from __future__ import annotations
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..errors import GenerationInProgress, InvalidAnswer, InvalidPhaseTransition, ModuleGenerationFailed
from ..generation_client import GenerationClient
from ..orchestrator import SessionOrchestrator
from ..schemas import Phase
from ..store import ProgressStore


router = APIRouter(prefix="/course", tags=["adaptive_course"])

RETRY_MESSAGE = "Could not generate content, please retry."


class StartRequest(BaseModel):
	subject: str = Field(min_length=1, description="Subject to build the course around")
	source_material: Optional[str] = Field(default=None, description="Text already extracted from uploaded documents")
	quiz_item_count: Optional[int] = Field(default=None, ge=1, le=20)
	learner_id: Optional[str] = None


class SessionRequest(BaseModel):
	session_id: str


class JumpRequest(BaseModel):
	session_id: str
	phase: Phase


class AnswerRequest(BaseModel):
	session_id: str
	index: int
	value: str


_sessions: Dict[str, SessionOrchestrator] = {}
_client: Optional[GenerationClient] = None
_store: Optional[ProgressStore] = None


def get_generation_client():
	global _client
	if _client is None:
		try:
			_client = GenerationClient()
		except ValueError as e:
			raise HTTPException(status_code=503, detail=str(e))
	return _client


def get_progress_store() -> Optional[ProgressStore]:
	global _store
	if _store is None:
		_store = ProgressStore()
	return _store


async def close_generation_client() -> None:
	global _client
	if _client is not None:
		await _client.aclose()
		_client = None


def _get_session(session_id: str) -> SessionOrchestrator:
	orchestrator = _sessions.get(session_id)
	if not orchestrator:
		raise HTTPException(status_code=404, detail="Session not found")
	return orchestrator


def _raise_http(err: Exception) -> None:
	if isinstance(err, ModuleGenerationFailed):
		raise HTTPException(status_code=502, detail=RETRY_MESSAGE)
	if isinstance(err, GenerationInProgress):
		raise HTTPException(status_code=409, detail="A module is already being generated")
	if isinstance(err, InvalidAnswer):
		raise HTTPException(status_code=400, detail=str(err))
	if isinstance(err, InvalidPhaseTransition):
		raise HTTPException(status_code=409, detail=str(err))
	raise err


@router.post("/session/start")
async def start_session(req: StartRequest, client=Depends(get_generation_client), store=Depends(get_progress_store)) -> Dict[str, Any]:
	orchestrator = SessionOrchestrator(
		client,
		req.subject.strip(),
		source_material=req.source_material,
		quiz_item_count=req.quiz_item_count,
		learner_id=req.learner_id,
		store=store,
	)
	try:
		await orchestrator.start_session()
	except (ModuleGenerationFailed, GenerationInProgress) as e:
		_raise_http(e)
	_sessions[orchestrator.session_id] = orchestrator
	return orchestrator.snapshot()


@router.get("/session/state")
async def get_state(session_id: str) -> Dict[str, Any]:
	return _get_session(session_id).snapshot()


@router.post("/session/advance")
async def advance(req: SessionRequest) -> Dict[str, Any]:
	orchestrator = _get_session(req.session_id)
	try:
		orchestrator.advance()
	except InvalidPhaseTransition as e:
		_raise_http(e)
	return orchestrator.snapshot()


@router.post("/session/jump")
async def jump(req: JumpRequest) -> Dict[str, Any]:
	orchestrator = _get_session(req.session_id)
	try:
		orchestrator.jump_to(req.phase)
	except InvalidPhaseTransition as e:
		_raise_http(e)
	return orchestrator.snapshot()


@router.post("/session/answer")
async def submit_answer(req: AnswerRequest) -> Dict[str, Any]:
	orchestrator = _get_session(req.session_id)
	try:
		orchestrator.submit_answer(req.index, req.value)
	except InvalidPhaseTransition as e:
		_raise_http(e)
	return orchestrator.snapshot()


@router.post("/session/evaluate")
async def evaluate(req: SessionRequest) -> Dict[str, Any]:
	orchestrator = _get_session(req.session_id)
	try:
		result = orchestrator.evaluate()
	except InvalidPhaseTransition as e:
		_raise_http(e)
	return {**orchestrator.snapshot(), "result": result.model_dump()}


@router.post("/session/next")
async def next_module(req: SessionRequest) -> Dict[str, Any]:
	orchestrator = _get_session(req.session_id)
	try:
		await orchestrator.request_next_module()
	except (ModuleGenerationFailed, GenerationInProgress, InvalidPhaseTransition) as e:
		_raise_http(e)
	return orchestrator.snapshot()


@router.post("/session/restart")
async def restart(req: SessionRequest) -> Dict[str, Any]:
	orchestrator = _get_session(req.session_id)
	try:
		await orchestrator.restart()
	except ModuleGenerationFailed as e:
		_raise_http(e)
	return orchestrator.snapshot()


@router.delete("/session/{session_id}")
async def exit_session(session_id: str) -> Dict[str, Any]:
	orchestrator = _sessions.pop(session_id, None)
	if not orchestrator:
		raise HTTPException(status_code=404, detail="Session not found")
	orchestrator.exit()
	return {"ok": True}
