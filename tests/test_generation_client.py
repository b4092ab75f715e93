"""
Tests for the Generation Client against a mocked HTTP transport.
"""

import json

import httpx
import pytest

from backend.course.errors import GenerationFailure
from backend.course.generation_client import GenerationClient
from backend.course.schemas import GenerationPrompt


PROMPT = GenerationPrompt(system="You are a tutor.", user="Generate Module 1 for the subject: Algebra")


def _client(handler, **kwargs):
	kwargs.setdefault("provider", "openai_compatible")
	return GenerationClient("test-key", base_url="https://llm.test/v1", transport=httpx.MockTransport(handler), **kwargs)


class TestChatCompletions:

	@pytest.mark.asyncio
	async def test_sends_system_and_user_messages(self):
		seen = {}

		def handler(request: httpx.Request) -> httpx.Response:
			seen["url"] = str(request.url)
			seen["auth"] = request.headers["Authorization"]
			seen["body"] = json.loads(request.content)
			return httpx.Response(200, json={"choices": [{"message": {"content": "{\"title\": \"Algebra\"}"}}]})

		client = _client(handler, model="test-model")
		text = await client.generate(PROMPT)
		await client.aclose()

		assert text == "{\"title\": \"Algebra\"}"
		assert seen["url"] == "https://llm.test/v1/chat/completions"
		assert seen["auth"] == "Bearer test-key"
		assert seen["body"]["model"] == "test-model"
		assert seen["body"]["messages"] == [
			{"role": "system", "content": "You are a tutor."},
			{"role": "user", "content": "Generate Module 1 for the subject: Algebra"},
		]

	@pytest.mark.asyncio
	async def test_error_status_raises_generation_failure(self):
		calls = []

		def handler(request):
			calls.append(request)
			return httpx.Response(503, text="overloaded")

		client = _client(handler)
		with pytest.raises(GenerationFailure) as exc_info:
			await client.generate(PROMPT)
		await client.aclose()
		assert exc_info.value.status == 503
		# Single attempt, no retry
		assert len(calls) == 1

	@pytest.mark.asyncio
	async def test_transport_error_raises_generation_failure(self):
		def handler(request):
			raise httpx.ConnectError("connection refused", request=request)

		client = _client(handler)
		with pytest.raises(GenerationFailure) as exc_info:
			await client.generate(PROMPT)
		await client.aclose()
		assert exc_info.value.status is None

	@pytest.mark.asyncio
	async def test_unexpected_body_raises_generation_failure(self):
		client = _client(lambda request: httpx.Response(200, json={"choices": []}))
		with pytest.raises(GenerationFailure):
			await client.generate(PROMPT)
		await client.aclose()

	@pytest.mark.asyncio
	async def test_non_json_body_raises_generation_failure(self):
		client = _client(lambda request: httpx.Response(200, text="<html>gateway</html>"))
		with pytest.raises(GenerationFailure):
			await client.generate(PROMPT)
		await client.aclose()


class TestGemini:

	@pytest.mark.asyncio
	async def test_gemini_payload_and_response(self):
		seen = {}

		def handler(request):
			seen["key"] = request.url.params.get("key")
			seen["body"] = json.loads(request.content)
			return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "lesson"}]}}]})

		client = GenerationClient("g-key", provider="gemini", base_url="https://gemini.test/generate", transport=httpx.MockTransport(handler))
		assert await client.generate(PROMPT) == "lesson"
		await client.aclose()
		assert seen["key"] == "g-key"
		assert seen["body"]["systemInstruction"]["parts"][0]["text"] == "You are a tutor."
		assert seen["body"]["contents"][0]["parts"][0]["text"].startswith("Generate Module 1")


class TestConfiguration:

	def test_unknown_provider(self):
		with pytest.raises(ValueError):
			GenerationClient("k", provider="carrier-pigeon")

	def test_missing_key(self, monkeypatch):
		from backend.course import generation_client

		monkeypatch.setattr(generation_client.settings, "chat_api_key", None)
		with pytest.raises(ValueError):
			GenerationClient(provider="openai_compatible")
