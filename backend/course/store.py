from __future__ import annotations
import json
from typing import Callable

from sqlalchemy.orm import Session

from .db import SessionLocal
from .models import CourseProgress
from .schemas import ModuleOutcome


class ProgressStore:
	"""Persists the latest quiz outcome per learner."""

	def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
		self._session_factory = session_factory

	def record(self, outcome: ModuleOutcome) -> None:
		if not outcome.learner_id:
			return
		db = self._session_factory()
		try:
			row = db.get(CourseProgress, outcome.learner_id)
			if not row:
				row = CourseProgress(learner_id=outcome.learner_id, subject=outcome.subject)
				db.add(row)
			row.subject = outcome.subject
			row.module_number = outcome.module_number
			row.last_score = outcome.last_score
			row.performance_level = outcome.performance_level.value
			row.xp = outcome.xp
			row.level = outcome.level
			row.achievements_json = json.dumps(outcome.achievements)
			db.commit()
		except Exception:
			db.rollback()
			raise
		finally:
			db.close()

