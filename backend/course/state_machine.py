from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from .classifier import STRONG_THRESHOLD, WEAK_THRESHOLD, classify
from .errors import InvalidAnswer, InvalidPhaseTransition
from .evaluator import grade, is_correct
from .schemas import PHASE_ORDER, LearningModule, PerformanceLevel, Phase, QuizResult


logger = logging.getLogger(__name__)


class SessionState:
	def __init__(self, module: Optional[LearningModule] = None) -> None:
		self.phase: Phase = Phase.INTRO
		self.current_module: Optional[LearningModule] = module
		self.answers: Dict[int, str] = {}
		self.last_score: Optional[int] = None
		self.performance_level: Optional[PerformanceLevel] = None
		self.quiz_result: Optional[QuizResult] = None

	@property
	def evaluated(self) -> bool:
		return self.last_score is not None


class ModuleStateMachine:
	"""Moves one learner through intro -> explanation -> practice -> quiz -> summary.

	Every rejected operation raises InvalidPhaseTransition before touching the
	state, so a failed call never leaves a half-applied change behind.
	"""

	def __init__(self, *, strong_at: int = STRONG_THRESHOLD, weak_below: int = WEAK_THRESHOLD) -> None:
		self.state = SessionState()
		self.strong_at = strong_at
		self.weak_below = weak_below

	@property
	def phase(self) -> Phase:
		return self.state.phase

	@property
	def module(self) -> Optional[LearningModule]:
		return self.state.current_module

	def _require_module(self) -> LearningModule:
		if self.state.current_module is None:
			raise InvalidPhaseTransition("No module loaded")
		return self.state.current_module

	def start(self, module: LearningModule) -> None:
		# Replaced wholesale: answers, score and level never carry over between modules
		self.state = SessionState(module)

	def advance(self) -> Phase:
		self._require_module()
		idx = PHASE_ORDER.index(self.state.phase)
		if idx < len(PHASE_ORDER) - 1:
			self.state.phase = PHASE_ORDER[idx + 1]
		return self.state.phase

	def jump_to(self, phase: Phase | str) -> Phase:
		self._require_module()
		try:
			target = Phase(phase)
		except ValueError:
			raise InvalidPhaseTransition(f"Unknown phase: {phase!r}")
		self.state.phase = target
		return target

	def _require_open_quiz(self, action: str) -> LearningModule:
		module = self._require_module()
		if self.state.phase is not Phase.QUIZ:
			raise InvalidPhaseTransition(f"Cannot {action} during the {self.state.phase.value} phase")
		if self.state.evaluated:
			raise InvalidPhaseTransition(f"Cannot {action}: this quiz has already been evaluated")
		return module

	def submit_answer(self, index: int, value: str) -> None:
		module = self._require_open_quiz("submit an answer")
		if not 0 <= index < len(module.quiz_items):
			raise InvalidAnswer(f"Quiz item {index} does not exist (module has {len(module.quiz_items)})")
		self.state.answers[index] = value

	def evaluate(self) -> QuizResult:
		module = self._require_open_quiz("evaluate")
		if not module.quiz_items:
			raise InvalidPhaseTransition("Cannot evaluate a module without quiz items")
		result = grade(module.quiz_items, self.state.answers)
		level = classify(result.percentage, strong_at=self.strong_at, weak_below=self.weak_below)
		self.state.quiz_result = result
		self.state.last_score = result.percentage
		self.state.performance_level = level
		self.state.phase = Phase.SUMMARY
		logger.info(
			"Module %d evaluated: %d/%d correct (%d%%), level=%s",
			module.module_number, result.correct_count, result.total, result.percentage, level.value,
		)
		return result

	def visible_content(self) -> Dict[str, Any]:
		"""Return only the data the current phase is allowed to show."""
		module = self._require_module()
		state = self.state
		view: Dict[str, Any] = {
			"module_number": module.module_number,
			"title": module.title,
			"phase": state.phase.value,
			"phase_index": PHASE_ORDER.index(state.phase),
		}
		if state.phase is Phase.INTRO:
			view["objectives"] = list(module.objectives)
			view["introduction"] = module.introduction
		elif state.phase is Phase.EXPLANATION:
			view["explanation"] = module.explanation
		elif state.phase is Phase.PRACTICE:
			view["practice_items"] = [item.model_dump(mode="json") for item in module.practice_items]
		elif state.phase is Phase.QUIZ:
			view["quiz_items"] = [
				self._quiz_entry(i, reveal=state.evaluated) for i in range(len(module.quiz_items))
			]
			view["evaluated"] = state.evaluated
		else:
			view["summary_points"] = list(module.summary_points)
			view["next_module_preview"] = module.next_module_preview
			view["last_score"] = state.last_score
			view["performance_level"] = state.performance_level.value if state.performance_level else None
			if state.evaluated:
				view["quiz_review"] = [self._quiz_entry(i, reveal=True) for i in range(len(module.quiz_items))]
		return view

	def _quiz_entry(self, index: int, *, reveal: bool) -> Dict[str, Any]:
		item = self.state.current_module.quiz_items[index]
		answer = self.state.answers.get(index)
		entry: Dict[str, Any] = {
			"index": index,
			"question": item.question,
			"kind": item.kind.value,
			"options": list(item.options),
			"answer": answer,
		}
		if reveal:
			entry["correct_answer"] = item.correct_answer
			entry["explanation"] = item.explanation
			entry["correct"] = is_correct(item, answer)
		return entry
