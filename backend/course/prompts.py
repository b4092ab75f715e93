from __future__ import annotations
from typing import List, Optional, Sequence

from .schemas import GenerationPrompt, PerformanceLevel
from .settings import settings


SYSTEM_PROMPT_TEMPLATE = """You are a friendly tutor in Adaptive Course Mode who guides students step by step.

Each module follows a fixed sequence:
1. Intro: an overview plus learning objectives
2. Explanation: teach step by step, with Socratic questions where possible
3. Practice: 2-3 practice problems, each with a hint and a worked solution
4. Quiz: exactly {quiz_count} questions with unambiguous correct answers
5. Summary: the key takeaways and a preview of the next module

Adapt the content to the student's performance on the previous module.

Return ONLY a single JSON object with these exact keys:
{{
  "title": "string",
  "objectives": ["string", "string", "string"],
  "introduction": "string",
  "explanation": "string with Socratic questions",
  "practiceItems": [
    {{"question": "string", "hint": "string", "solution": "string", "difficulty": "easy|medium|hard"}}
  ],
  "quizItems": [
    {{
      "question": "string",
      "kind": "multiple_choice|short_answer|applied",
      "options": ["option1", "option2", "option3", "option4"],
      "correctAnswer": "string",
      "explanation": "string"
    }}
  ],
  "summaryPoints": ["string", "string", "string"],
  "nextModulePreview": "string"
}}
Only include "options" for multiple_choice questions, and make "correctAnswer" the exact text of the right option.
For short answers keep "correctAnswer" to a word or short phrase.
No markdown, no commentary outside the JSON object."""


NEUTRAL_GUIDANCE = (
	"This is the student's first module. Start from the fundamentals at a moderate pace "
	"and gauge their level through the quiz."
)

UNASSESSED_GUIDANCE = (
	"The student moved on without taking the previous quiz. Briefly recap the previous "
	"module, then continue to new material at a moderate pace."
)

BRANCHING_GUIDANCE = {
	PerformanceLevel.STRONG: (
		"The student mastered the previous module. Increase the conceptual difficulty, "
		"introduce new sub-topics, and move at a brisker pace."
	),
	PerformanceLevel.WEAK: (
		"The student struggled with the previous module. Before progressing, re-teach the same "
		"core concepts using simpler language, shorter steps and more worked examples. "
		"Keep the tone encouraging."
	),
	PerformanceLevel.PARTIAL: (
		"The student partly understood the previous module. Reinforce the aspects they missed "
		"while still advancing to new material at a careful pace."
	),
}


def build_system_prompt(quiz_count: int) -> str:
	return SYSTEM_PROMPT_TEMPLATE.format(quiz_count=quiz_count)


def _truncate(material: str, limit: int) -> str:
	if len(material) <= limit:
		return material
	return material[:limit] + "\n[... material truncated ...]"


def build_module_prompt(
	subject: str,
	module_number: int,
	*,
	performance_level: Optional[PerformanceLevel] = None,
	last_score: Optional[int] = None,
	missed_questions: Sequence[str] = (),
	source_material: Optional[str] = None,
	quiz_count: Optional[int] = None,
) -> GenerationPrompt:
	"""Build the generation request for module `module_number`.

	`performance_level` is the classification recorded after the previous
	module. It is None for the first module, which gets neutral guidance, and
	for a later module whose predecessor's quiz was never evaluated.
	"""
	count = quiz_count or settings.quiz_item_count
	lines: List[str] = [f"Generate Module {module_number} for the subject: {subject}", ""]

	material = (source_material or "").strip()
	if material:
		lines.append(f"Based on this course material:\n---\n{_truncate(material, settings.max_source_chars)}\n---")
	else:
		lines.append("No specific material provided - create a comprehensive module.")
	lines.append("")

	if performance_level is None and module_number <= 1:
		lines.append("Student Performance Level: not yet assessed")
		lines.append("Previous Module Performance: First module")
		lines.append(NEUTRAL_GUIDANCE)
	elif performance_level is None:
		lines.append("Student Performance Level: not yet assessed")
		lines.append("Previous Module Performance: Previous module was not assessed")
		lines.append(UNASSESSED_GUIDANCE)
	else:
		lines.append(f"Student Performance Level: {performance_level.value}")
		score_text = f"{last_score}%" if last_score is not None else "not recorded"
		lines.append(f"Previous Module Performance: {score_text}")
		lines.append(BRANCHING_GUIDANCE[performance_level])
		if performance_level is not PerformanceLevel.STRONG and missed_questions:
			lines.append("Questions the student missed last time:")
			lines.extend(f"- {q}" for q in missed_questions)

	lines.append("")
	lines.append(f"The quiz must contain exactly {count} questions.")
	lines.append("Create an engaging, structured learning module that adapts to the student's current level.")
	return GenerationPrompt(system=build_system_prompt(count), user="\n".join(lines))
