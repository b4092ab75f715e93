from __future__ import annotations
from typing import Mapping, Optional, Sequence

from .schemas import QuizItem, QuizResult


def _normalize_answer(value: str) -> str:
	return value.strip().lower()


def is_correct(item: QuizItem, answer: Optional[str]) -> bool:
	if item.accepts_any_answer:
		return True
	if answer is None:
		return False
	return _normalize_answer(answer) == _normalize_answer(item.correct_answer)


def grade(quiz_items: Sequence[QuizItem], answers: Mapping[int, str]) -> QuizResult:
	"""Score answers by case-insensitive, whitespace-trimmed exact match.

	Unanswered items count as incorrect. Raises ValueError for an empty quiz,
	whose score is undefined.
	"""
	total = len(quiz_items)
	if total == 0:
		raise ValueError("Cannot score a quiz with no items")
	missed = [i for i, item in enumerate(quiz_items) if not is_correct(item, answers.get(i))]
	correct = total - len(missed)
	# Round half up, in integers
	percentage = (200 * correct + total) // (2 * total)
	return QuizResult(correct_count=correct, total=total, percentage=percentage, missed=missed)


def score(quiz_items: Sequence[QuizItem], answers: Mapping[int, str]) -> int:
	return grade(quiz_items, answers).percentage
