"""
Unit Tests for the Response Normalizer

Covers JSON extraction from chatty generator output and the fallback module.
"""

import json

import pytest

from backend.course.normalizer import FALLBACK_OBJECTIVES, build_fallback, extract_json_object, normalize
from backend.course.schemas import ACCEPT_ANY_ANSWER, QuizKind
from backend.course.validator import validate

from conftest import as_response, make_module_payload


class TestExtractJsonObject:
	"""Test locating the JSON object inside raw text."""

	def test_plain_json(self):
		payload = make_module_payload()
		assert extract_json_object(json.dumps(payload)) == payload

	def test_json_wrapped_in_prose_and_fence(self):
		payload = make_module_payload()
		assert extract_json_object(as_response(payload)) == payload

	def test_raw_newlines_inside_strings_are_tolerated(self):
		text = '{"title": "Line one\nline two", "objectives": []}'
		assert extract_json_object(text)["title"] == "Line one\nline two"

	def test_stray_brace_after_fenced_block(self):
		body = json.dumps({"title": "Fractions"})
		text = f"```json\n{body}\n```\nRemember: sets look like {{1, 2}}"
		assert extract_json_object(text) == {"title": "Fractions"}

	def test_no_braces(self):
		assert extract_json_object("Sure! Here's your lesson: ...") is None

	def test_truncated_json(self):
		assert extract_json_object('{"title": "Cut off", "objectives": ["a"') is None

	def test_object_inside_array_is_extracted(self):
		assert extract_json_object('[{"title": "x"}]') == {"title": "x"}
		assert extract_json_object("[1, 2, 3]") is None


class TestFallback:
	"""Test the deterministic fallback module."""

	def test_malformed_output_triggers_fallback(self):
		raw = "Sure! Here's your lesson: ..."
		data = normalize(raw, module_number=2, subject="Algebra")
		assert data["title"] == raw
		assert data["explanation"] == raw
		assert data["objectives"] == FALLBACK_OBJECTIVES
		assert len(data["quizItems"]) == 1
		assert data["quizItems"][0]["correctAnswer"] == ACCEPT_ANY_ANSWER

	def test_fallback_is_deterministic(self):
		raw = "Photosynthesis turns light into sugar."
		assert normalize(raw) == normalize(raw)

	def test_introduction_is_truncated(self):
		raw = "x" * 800
		data = build_fallback(raw, intro_chars=500)
		assert data["introduction"] == "x" * 500 + "..."
		assert data["explanation"] == raw

	def test_short_text_is_not_truncated(self):
		data = build_fallback("Short lesson.", intro_chars=500)
		assert data["introduction"] == "Short lesson."

	def test_title_uses_first_non_blank_line_without_markdown(self):
		data = build_fallback("\n\n## **Cell Biology**\nCells are the unit of life.")
		assert data["title"] == "Cell Biology"

	def test_empty_text_synthesizes_title(self):
		assert build_fallback("", module_number=3, subject="Physics")["title"] == "Module 3: Physics Fundamentals"
		assert build_fallback("   ")["title"] == "Module 1"

	def test_non_string_input(self):
		data = normalize(None)
		assert data["explanation"] == ""


class TestNormalizationTotality:
	"""Normalizer -> Validator always yields a structurally valid module."""

	@pytest.mark.parametrize("raw", [
		"",
		"   \n\t",
		"Sure! Here's your lesson: ...",
		'{"title": "Cut off", "quizItems": [{"question": "Q?"',
		"{not json at all}",
		'{"title": 42, "objectives": "just one", "quizItems": "none"}',
		'{"quizItems": [{"question": "Pick", "kind": "mcq", "options": ["only"]}]}',
		"}{",
	])
	def test_always_valid(self, raw):
		module = validate(normalize(raw))
		assert module.title.strip()
		assert module.objectives and all(o.strip() for o in module.objectives)
		for item in module.quiz_items:
			if item.kind is QuizKind.MULTIPLE_CHOICE:
				assert len(item.options) >= 2
			else:
				assert item.options == ()

	def test_nesting_beyond_decoder_limit_falls_back(self):
		raw = '{"title": "Deep", "explanation": ' + "[" * 100000 + "]" * 100000 + "}"
		assert extract_json_object(raw) is None
		module = validate(normalize(raw, module_number=2))
		assert module.module_number == 2
		assert module.quiz_items[0].accepts_any_answer

	def test_deep_but_parsable_nesting_is_flattened(self):
		raw = '{"title": "Deep", "explanation": ' + "[" * 400 + '"inner text"' + "]" * 400 + "}"
		module = validate(normalize(raw))
		assert module.title == "Deep"
		assert module.explanation == "inner text"
