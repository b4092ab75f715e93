from __future__ import annotations
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# Marks a self-graded quiz item: any submitted answer satisfies it.
ACCEPT_ANY_ANSWER = "Student's own explanation"


class Phase(str, Enum):
	INTRO = "intro"
	EXPLANATION = "explanation"
	PRACTICE = "practice"
	QUIZ = "quiz"
	SUMMARY = "summary"


PHASE_ORDER: List[Phase] = [Phase.INTRO, Phase.EXPLANATION, Phase.PRACTICE, Phase.QUIZ, Phase.SUMMARY]


class Difficulty(str, Enum):
	EASY = "easy"
	MEDIUM = "medium"
	HARD = "hard"


class QuizKind(str, Enum):
	MULTIPLE_CHOICE = "multiple_choice"
	SHORT_ANSWER = "short_answer"
	APPLIED = "applied"


class PerformanceLevel(str, Enum):
	STRONG = "strong"
	PARTIAL = "partial"
	WEAK = "weak"


class PracticeItem(BaseModel):
	model_config = ConfigDict(frozen=True)

	question: str
	hint: str = ""
	solution: str = ""
	difficulty: Difficulty = Difficulty.MEDIUM


class QuizItem(BaseModel):
	model_config = ConfigDict(frozen=True)

	question: str
	kind: QuizKind = QuizKind.SHORT_ANSWER
	# Only populated for multiple_choice items
	options: Tuple[str, ...] = ()
	correct_answer: str = ACCEPT_ANY_ANSWER
	explanation: str = ""

	@property
	def accepts_any_answer(self) -> bool:
		return self.correct_answer == ACCEPT_ANY_ANSWER


class LearningModule(BaseModel):
	"""One generated unit of lesson content. Immutable once validated.

	Sequence fields are tuples so the content cannot be edited in place either.
	"""

	model_config = ConfigDict(frozen=True)

	module_number: int = Field(ge=1)
	title: str
	objectives: Tuple[str, ...]
	introduction: str = ""
	explanation: str = ""
	practice_items: Tuple[PracticeItem, ...] = ()
	quiz_items: Tuple[QuizItem, ...] = ()
	summary_points: Tuple[str, ...] = ()
	next_module_preview: str = ""


class GenerationPrompt(BaseModel):
	system: str
	user: str


class QuizResult(BaseModel):
	correct_count: int
	total: int
	percentage: int
	# Indices of quiz items answered incorrectly or left blank
	missed: List[int] = Field(default_factory=list)


class ModuleOutcome(BaseModel):
	"""What the orchestrator hands to the persistence collaborator after a quiz."""

	learner_id: Optional[str] = None
	subject: str
	module_number: int
	last_score: int
	performance_level: PerformanceLevel
	xp: int = 0
	level: int = 1
	achievements: List[str] = Field(default_factory=list)
