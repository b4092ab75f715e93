from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from .schemas import (
	ACCEPT_ANY_ANSWER,
	Difficulty,
	LearningModule,
	PracticeItem,
	QuizItem,
	QuizKind,
)


logger = logging.getLogger(__name__)

GENERIC_OBJECTIVE = "Understand the core concepts of this module"

# Accepted spellings for each field: prompt contract, python attribute, legacy generator keys
_KEYS: Dict[str, tuple] = {
	"module_number": ("moduleNumber", "module_number"),
	"title": ("title", "lessonTitle"),
	"objectives": ("objectives", "learningObjectives"),
	"introduction": ("introduction",),
	"explanation": ("explanation",),
	"practice_items": ("practiceItems", "practice_items", "practiceQuestions"),
	"quiz_items": ("quizItems", "quiz_items", "quiz"),
	"summary_points": ("summaryPoints", "summary_points", "summary"),
	"next_module_preview": ("nextModulePreview", "next_module_preview"),
	"kind": ("kind", "type"),
	"correct_answer": ("correctAnswer", "correct_answer"),
}

_KIND_ALIASES: Dict[str, QuizKind] = {
	"multiple_choice": QuizKind.MULTIPLE_CHOICE,
	"multiple-choice": QuizKind.MULTIPLE_CHOICE,
	"multiple choice": QuizKind.MULTIPLE_CHOICE,
	"multiplechoice": QuizKind.MULTIPLE_CHOICE,
	"mcq": QuizKind.MULTIPLE_CHOICE,
	"short_answer": QuizKind.SHORT_ANSWER,
	"short-answer": QuizKind.SHORT_ANSWER,
	"short answer": QuizKind.SHORT_ANSWER,
	"open": QuizKind.SHORT_ANSWER,
	"applied": QuizKind.APPLIED,
	"application": QuizKind.APPLIED,
}


def _pick(data: Dict[str, Any], field: str) -> Any:
	for key in _KEYS.get(field, (field,)):
		if key in data and data[key] is not None:
			return data[key]
	return None


def _text(value: Any) -> str:
	# Nested lists are flattened with an explicit stack; depth is unbounded
	parts: List[str] = []
	stack = [value]
	while stack:
		item = stack.pop()
		if isinstance(item, list):
			stack.extend(reversed(item))
		elif isinstance(item, str):
			if item.strip():
				parts.append(item.strip())
		elif isinstance(item, (int, float)) and not isinstance(item, bool):
			parts.append(str(item))
	return "\n\n".join(parts)


def _text_list(value: Any) -> List[str]:
	if isinstance(value, str):
		value = [value]
	if not isinstance(value, list):
		return []
	return [t for t in (_text(v) for v in value) if t]


def _coerce_practice(raw: Any) -> Optional[PracticeItem]:
	if not isinstance(raw, dict):
		return None
	question = _text(raw.get("question"))
	if not question:
		return None
	difficulty = _text(raw.get("difficulty")).lower()
	try:
		level = Difficulty(difficulty)
	except ValueError:
		level = Difficulty.MEDIUM
	return PracticeItem(
		question=question,
		hint=_text(raw.get("hint")),
		solution=_text(raw.get("solution")),
		difficulty=level,
	)


def _coerce_quiz(raw: Any) -> Optional[QuizItem]:
	if not isinstance(raw, dict):
		return None
	question = _text(raw.get("question"))
	if not question:
		return None
	options = _text_list(raw.get("options"))
	declared = _text(_pick(raw, "kind")).lower()
	kind = _KIND_ALIASES.get(declared)
	if kind is None:
		kind = QuizKind.MULTIPLE_CHOICE if len(options) >= 2 else QuizKind.SHORT_ANSWER
	if kind is QuizKind.MULTIPLE_CHOICE and len(options) < 2:
		logger.debug("Downgrading multiple-choice item with %d options: %r", len(options), question)
		kind = QuizKind.SHORT_ANSWER
	if kind is not QuizKind.MULTIPLE_CHOICE:
		options = []

	answer = _pick(raw, "correct_answer")
	if kind is QuizKind.MULTIPLE_CHOICE and isinstance(answer, int) and not isinstance(answer, bool) and 0 <= answer < len(options):
		correct = options[answer]
	else:
		correct = _text(answer) or ACCEPT_ANY_ANSWER
	return QuizItem(
		question=question,
		kind=kind,
		options=options,
		correct_answer=correct,
		explanation=_text(raw.get("explanation")),
	)


def _items(value: Any, coerce) -> list:
	if not isinstance(value, list):
		return []
	return [item for item in (coerce(v) for v in value) if item is not None]


def validate(candidate: Any, *, module_number: Optional[int] = None) -> LearningModule:
	"""Coerce a loosely-structured candidate into a LearningModule.

	Total: every missing or malformed field is replaced by the least surprising
	substitute, so this never raises for any input. Applying it to its own
	output returns an equal module.
	"""
	if isinstance(candidate, LearningModule):
		data = candidate.model_dump(mode="json")
	elif isinstance(candidate, dict):
		data = candidate
	else:
		data = {}

	if module_number is None:
		declared = _pick(data, "module_number")
		if isinstance(declared, int) and not isinstance(declared, bool) and declared >= 1:
			module_number = declared
		else:
			module_number = 1

	title = _text(_pick(data, "title")) or f"Module {module_number}"
	objectives = _text_list(_pick(data, "objectives")) or [GENERIC_OBJECTIVE]

	return LearningModule(
		module_number=module_number,
		title=title,
		objectives=objectives,
		introduction=_text(_pick(data, "introduction")),
		explanation=_text(_pick(data, "explanation")),
		practice_items=_items(_pick(data, "practice_items"), _coerce_practice),
		quiz_items=_items(_pick(data, "quiz_items"), _coerce_quiz),
		summary_points=_text_list(_pick(data, "summary_points")),
		next_module_preview=_text(_pick(data, "next_module_preview")),
	)
