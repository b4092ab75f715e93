from __future__ import annotations
import json
import logging
import re
from typing import Any, Dict, Optional

from .schemas import ACCEPT_ANY_ANSWER
from .settings import settings


logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_MARKDOWN_PREFIX = re.compile(r"^[#>*\-\s]+")
_MAX_TITLE_CHARS = 120

FALLBACK_OBJECTIVES = [
	"Understand the core concepts",
	"Apply knowledge through practice",
	"Demonstrate understanding through assessment",
]
FALLBACK_SUMMARY = ["Key concept learned", "Practical application", "Next steps"]
FALLBACK_PREVIEW = "We'll build on this foundation in the next module"


def _loads_object(candidate: str) -> Optional[Dict[str, Any]]:
	try:
		# strict=False: generators often emit raw newlines inside string values
		data = json.loads(candidate, strict=False)
	except (ValueError, RecursionError):
		# RecursionError: nesting deeper than the decoder can follow
		return None
	return data if isinstance(data, dict) else None


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
	first = text.find("{")
	last = text.rfind("}")
	if first != -1 and last > first:
		data = _loads_object(text[first : last + 1])
		if data is not None:
			return data
	# Prose after the object can contain a stray brace; a fenced block is still usable
	for block in _FENCED_JSON.findall(text):
		data = _loads_object(block)
		if data is not None:
			return data
	return None


def _fallback_title(text: str, module_number: Optional[int], subject: Optional[str]) -> str:
	for line in text.splitlines():
		cleaned = _MARKDOWN_PREFIX.sub("", line).strip().strip("*").strip()
		if cleaned:
			return cleaned[:_MAX_TITLE_CHARS]
	n = module_number or 1
	if subject:
		return f"Module {n}: {subject} Fundamentals"
	return f"Module {n}"


def build_fallback(
	text: str,
	*,
	module_number: Optional[int] = None,
	subject: Optional[str] = None,
	intro_chars: Optional[int] = None,
) -> Dict[str, Any]:
	limit = intro_chars if intro_chars is not None else settings.fallback_intro_chars
	introduction = text[:limit] + "..." if len(text) > limit else text
	return {
		"moduleNumber": module_number or 1,
		"title": _fallback_title(text, module_number, subject),
		"objectives": list(FALLBACK_OBJECTIVES),
		"introduction": introduction,
		"explanation": text,
		"practiceItems": [
			{
				"question": "What is the main concept you learned?",
				"hint": "Think about the key points discussed",
				"solution": "The main concept is...",
				"difficulty": "easy",
			}
		],
		"quizItems": [
			{
				"question": "Explain the main concept in your own words",
				"kind": "short_answer",
				"correctAnswer": ACCEPT_ANY_ANSWER,
				"explanation": "Great job explaining the concept!",
			}
		],
		"summaryPoints": list(FALLBACK_SUMMARY),
		"nextModulePreview": FALLBACK_PREVIEW,
	}


def normalize(
	raw: Optional[str],
	*,
	module_number: Optional[int] = None,
	subject: Optional[str] = None,
) -> Dict[str, Any]:
	"""Turn raw generator output into a candidate module object.

	Never raises: when no JSON object can be recovered from the text a
	deterministic fallback built from the text itself is returned instead.
	"""
	text = raw if isinstance(raw, str) else ""
	data = extract_json_object(text)
	if data is not None:
		return data
	logger.warning("Generator output had no parsable JSON object (%d chars); using fallback module", len(text))
	return build_fallback(text, module_number=module_number, subject=subject)
