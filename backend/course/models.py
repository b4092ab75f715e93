from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text
from .db import Base


class CourseProgress(Base):
	__tablename__ = "course_progress"
	# Single entry per learner; stores the latest evaluated module
	learner_id = Column(String(128), primary_key=True, index=True)
	subject = Column(String(256), nullable=False)
	module_number = Column(Integer, default=1, nullable=False)
	last_score = Column(Integer, nullable=True)
	performance_level = Column(String(16), nullable=True)
	xp = Column(Integer, default=0, nullable=False)
	level = Column(Integer, default=1, nullable=False)
	achievements_json = Column(Text, nullable=True)  # JSON list of achievement names
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
