from __future__ import annotations
import logging
import uuid
from typing import Any, Dict, List, Optional

from .errors import GenerationFailure, GenerationInProgress, InvalidPhaseTransition, ModuleGenerationFailed
from .normalizer import normalize
from .progress import LearnerProgress
from .prompts import build_module_prompt
from .schemas import LearningModule, ModuleOutcome, Phase, QuizResult
from .settings import settings
from .state_machine import ModuleStateMachine
from .validator import validate


logger = logging.getLogger(__name__)


class SessionOrchestrator:
	"""Drives one learner's adaptive session.

	Sequences prompt building, the generation call, normalization and
	validation, and hands accepted modules to the state machine. At most one
	generation call is outstanding at a time; results that arrive after a
	restart or exit are dropped without touching the session.
	"""

	def __init__(
		self,
		client,
		subject: str,
		*,
		source_material: Optional[str] = None,
		quiz_item_count: Optional[int] = None,
		learner_id: Optional[str] = None,
		store=None,
	) -> None:
		self.client = client
		self.subject = subject
		self.source_material = source_material
		self.quiz_item_count = quiz_item_count or settings.quiz_item_count
		self.learner_id = learner_id
		self.store = store
		self.session_id = uuid.uuid4().hex
		self.machine = ModuleStateMachine(strong_at=settings.strong_threshold, weak_below=settings.weak_threshold)
		self.progress = LearnerProgress()
		self.new_achievements: List[str] = []
		self._in_flight = False
		self._token = 0

	@property
	def in_flight(self) -> bool:
		return self._in_flight

	@property
	def state(self):
		return self.machine.state

	async def start_session(self) -> Optional[LearningModule]:
		return await self._load_module(1)

	async def restart(self) -> Optional[LearningModule]:
		self._discard()
		return await self._load_module(1)

	async def request_next_module(self) -> Optional[LearningModule]:
		state = self.machine.state
		module = state.current_module
		if module is None:
			raise InvalidPhaseTransition("No module loaded; start the session first")
		missed: List[str] = []
		if state.quiz_result is not None:
			missed = [module.quiz_items[i].question for i in state.quiz_result.missed]
		return await self._load_module(
			module.module_number + 1,
			performance_level=state.performance_level,
			last_score=state.last_score,
			missed_questions=missed,
		)

	def exit(self) -> None:
		self._discard()
		self.machine = ModuleStateMachine(strong_at=settings.strong_threshold, weak_below=settings.weak_threshold)

	def _discard(self) -> None:
		# Anything still in flight belongs to the old session and will be dropped on arrival
		self._token += 1
		self._in_flight = False

	async def _load_module(self, module_number: int, **adaptive: Any) -> Optional[LearningModule]:
		if self._in_flight:
			raise GenerationInProgress(f"A module is already being generated for session {self.session_id}")
		token = self._token
		prompt = build_module_prompt(
			self.subject,
			module_number,
			source_material=self.source_material,
			quiz_count=self.quiz_item_count,
			**adaptive,
		)
		self._in_flight = True
		try:
			raw = await self.client.generate(prompt)
		except GenerationFailure as exc:
			if token != self._token:
				logger.info("Ignoring failure of a discarded generation request: %s", exc)
				return None
			logger.warning("Generation of module %d for %r failed: %s", module_number, self.subject, exc)
			raise ModuleGenerationFailed(module_number, exc) from exc
		finally:
			if token == self._token:
				self._in_flight = False

		if token != self._token:
			logger.info("Discarding module %d: session was restarted or closed while generating", module_number)
			return None

		module = validate(normalize(raw, module_number=module_number, subject=self.subject), module_number=module_number)
		self.machine.start(module)
		self.new_achievements = self.progress.record_module()
		logger.info(
			"Loaded module %d %r (%d practice, %d quiz items)",
			module.module_number, module.title, len(module.practice_items), len(module.quiz_items),
		)
		return module

	def advance(self) -> Phase:
		return self.machine.advance()

	def jump_to(self, phase: Phase | str) -> Phase:
		return self.machine.jump_to(phase)

	def submit_answer(self, index: int, value: str) -> None:
		self.machine.submit_answer(index, value)

	def evaluate(self) -> QuizResult:
		result = self.machine.evaluate()
		state = self.machine.state
		self.new_achievements = self.progress.record_quiz(result.percentage, state.performance_level)
		if self.store is not None:
			outcome = ModuleOutcome(
				learner_id=self.learner_id,
				subject=self.subject,
				module_number=state.current_module.module_number,
				last_score=state.last_score,
				performance_level=state.performance_level,
				xp=self.progress.xp,
				level=self.progress.level,
				achievements=list(self.progress.achievements),
			)
			try:
				self.store.record(outcome)
			except Exception:
				# Persistence is optional
				logger.exception("Failed to persist progress for learner %s", self.learner_id)
		return result

	def snapshot(self) -> Dict[str, Any]:
		state = self.machine.state
		return {
			"session_id": self.session_id,
			"subject": self.subject,
			"generating": self._in_flight,
			"module": self.machine.visible_content() if state.current_module is not None else None,
			"last_score": state.last_score,
			"performance_level": state.performance_level.value if state.performance_level else None,
			"progress": self.progress.as_dict(),
			"new_achievements": list(self.new_achievements),
		}
