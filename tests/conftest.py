import asyncio
import json
from typing import Any, Dict, List, Optional

import pytest

from backend.course.errors import GenerationFailure


class FakeGenerationClient:
	"""Returns queued responses in order; queued exceptions are raised instead."""

	def __init__(self, *responses: Any) -> None:
		self.responses: List[Any] = list(responses)
		self.prompts = []

	async def generate(self, prompt) -> str:
		self.prompts.append(prompt)
		response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
		if isinstance(response, Exception):
			raise response
		return response


class GatedGenerationClient:
	"""Blocks every call until `release()` so tests can observe in-flight behaviour."""

	def __init__(self, response: str) -> None:
		self.response = response
		self.calls = 0
		self._gate = asyncio.Event()

	async def generate(self, prompt) -> str:
		self.calls += 1
		await self._gate.wait()
		return self.response

	def release(self) -> None:
		self._gate.set()


def make_module_payload(
	quiz: Optional[List[Dict[str, Any]]] = None,
	*,
	title: str = "Linear Equations",
) -> Dict[str, Any]:
	if quiz is None:
		quiz = [
			{"question": "Solve x + 2 = 5", "kind": "short_answer", "correctAnswer": "3", "explanation": "Subtract 2."},
			{
				"question": "Which is a linear equation?",
				"kind": "multiple_choice",
				"options": ["y = 2x + 1", "y = x^2", "y = 1/x"],
				"correctAnswer": "y = 2x + 1",
				"explanation": "Degree one.",
			},
			{"question": "What is the slope of y = 4x?", "kind": "applied", "correctAnswer": "4", "explanation": "Coefficient of x."},
		]
	return {
		"title": title,
		"objectives": ["Solve one-step equations", "Recognise linear forms"],
		"introduction": "Equations balance two expressions.",
		"explanation": "Whatever you do to one side, do to the other. What happens if you forget?",
		"practiceItems": [
			{"question": "Solve x - 4 = 1", "hint": "Add 4", "solution": "x = 5", "difficulty": "easy"},
		],
		"quizItems": quiz,
		"summaryPoints": ["Keep both sides balanced", "Linear means degree one"],
		"nextModulePreview": "Next we tackle two-step equations.",
	}


def as_response(payload: Dict[str, Any], *, prose: bool = True) -> str:
	body = json.dumps(payload)
	if not prose:
		return body
	return f"Here is your module:\n```json\n{body}\n```\nGood luck!"


@pytest.fixture
def algebra_response() -> str:
	return as_response(make_module_payload())
