from __future__ import annotations
from typing import List

from .schemas import PerformanceLevel


XP_PER_MODULE = 50
XP_PER_LEVEL = 100

FIRST_STEPS = "First Steps"
DEDICATED_LEARNER = "Dedicated Learner"
STREAK_MASTER = "Streak Master"
LEVEL_UP = "Level Up"


class LearnerProgress:
	"""XP, level and achievements earned across the modules of one session."""

	def __init__(self) -> None:
		self.xp = 0
		self.modules_started = 0
		self.strong_streak = 0
		self.achievements: List[str] = []

	@property
	def level(self) -> int:
		return self.xp // XP_PER_LEVEL + 1

	def record_module(self) -> List[str]:
		self.xp += XP_PER_MODULE
		self.modules_started += 1
		return self._check_achievements()

	def record_quiz(self, percentage: int, level: PerformanceLevel) -> List[str]:
		self.xp += percentage
		if level is PerformanceLevel.STRONG:
			self.strong_streak += 1
		else:
			self.strong_streak = 0
		return self._check_achievements()

	def _check_achievements(self) -> List[str]:
		earned = []
		if self.modules_started >= 1:
			earned.append(FIRST_STEPS)
		if self.modules_started >= 5:
			earned.append(DEDICATED_LEARNER)
		if self.strong_streak >= 3:
			earned.append(STREAK_MASTER)
		if self.level >= 5:
			earned.append(LEVEL_UP)
		new = [a for a in earned if a not in self.achievements]
		self.achievements.extend(new)
		return new

	def as_dict(self) -> dict:
		return {
			"xp": self.xp,
			"level": self.level,
			"modules_started": self.modules_started,
			"strong_streak": self.strong_streak,
			"achievements": list(self.achievements),
		}
