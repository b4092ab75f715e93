from __future__ import annotations
from typing import Optional


class CourseEngineError(Exception):
	"""Base class for errors raised by the adaptive course engine."""


class GenerationFailure(CourseEngineError):
	"""The text-generation service could not be reached or answered with an error."""

	def __init__(self, message: str, *, status: Optional[int] = None) -> None:
		super().__init__(message)
		self.message = message
		self.status = status

	def __str__(self) -> str:
		if self.status is not None:
			return f"{self.message} (status {self.status})"
		return self.message


class ModuleGenerationFailed(CourseEngineError):
	"""No module could be produced because the generation call failed.

	The session keeps whatever module it had before the request, so the caller
	can simply retry.
	"""

	def __init__(self, module_number: int, cause: GenerationFailure) -> None:
		super().__init__(f"Could not generate module {module_number}: {cause}")
		self.module_number = module_number
		self.cause = cause


class InvalidPhaseTransition(CourseEngineError):
	"""An operation was attempted from a phase that does not allow it."""


class InvalidAnswer(InvalidPhaseTransition):
	"""An answer was submitted for a quiz item that does not exist."""


class GenerationInProgress(CourseEngineError):
	"""A generation request is already outstanding for this session."""
