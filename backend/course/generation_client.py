from __future__ import annotations
import httpx
import logging
from typing import Any, Dict, Optional
from .errors import GenerationFailure
from .schemas import GenerationPrompt
from .settings import settings


logger = logging.getLogger(__name__)


class GenerationClient:
	"""Single-attempt async client for the text-generation service.

	Any transport error, non-success status or unreadable body surfaces as
	GenerationFailure; retrying is left to the caller.
	"""

	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		provider: Optional[str] = None,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.provider = provider or settings.generation_provider
		if self.provider == "gemini":
			self.api_key = api_key or settings.gemini_api_key
			self.model = model or settings.gemini_model
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
		elif self.provider == "openai_compatible":
			self.api_key = api_key or settings.chat_api_key
			self.model = model or settings.chat_model
			self.base_url = (base_url or settings.chat_base_url).rstrip("/") + "/chat/completions"
		else:
			raise ValueError(f"Unknown generation provider: {self.provider}")
		if not self.api_key:
			raise ValueError(f"No API key configured for generation provider {self.provider!r}")
		self.temperature = settings.generation_temperature
		self.max_tokens = settings.generation_max_tokens
		self._client = httpx.AsyncClient(timeout=settings.request_timeout_seconds, transport=transport)

	async def generate(self, prompt: GenerationPrompt) -> str:
		if self.provider == "gemini":
			payload: Dict[str, Any] = {
				"systemInstruction": {"parts": [{"text": prompt.system}]},
				"contents": [{"role": "user", "parts": [{"text": prompt.user}]}],
				"generationConfig": {"temperature": self.temperature, "maxOutputTokens": self.max_tokens},
			}
			data = await self._post(payload, params={"key": self.api_key}, headers={})
			try:
				return data["candidates"][0]["content"]["parts"][0]["text"]
			except (KeyError, IndexError, TypeError):
				raise GenerationFailure(f"Unexpected Gemini response: {str(data)[:200]}")
		payload = {
			"model": self.model,
			"temperature": self.temperature,
			"max_tokens": self.max_tokens,
			"messages": [
				{"role": "system", "content": prompt.system},
				{"role": "user", "content": prompt.user},
			],
		}
		data = await self._post(payload, params={}, headers={"Authorization": f"Bearer {self.api_key}"})
		try:
			content = data["choices"][0]["message"]["content"]
		except (KeyError, IndexError, TypeError):
			raise GenerationFailure(f"Unexpected chat completion response: {str(data)[:200]}")
		if not isinstance(content, str):
			raise GenerationFailure("Chat completion returned no text content")
		return content

	async def _post(self, payload: Dict[str, Any], *, params: Dict[str, Any], headers: Dict[str, str]) -> Any:
		try:
			r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			status = http_err.response.status_code
			logger.warning("Generation request to %s failed with status %d", self.provider, status)
			raise GenerationFailure(f"Generation service returned {status}: {http_err.response.text[:200]}", status=status) from http_err
		except httpx.RequestError as net_err:
			logger.warning("Generation request to %s failed: %s", self.provider, net_err)
			raise GenerationFailure(f"Generation service unreachable: {net_err}") from net_err
		try:
			return r.json()
		except ValueError as err:
			raise GenerationFailure(f"Generation service returned non-JSON body: {r.text[:200]}", status=r.status_code) from err

	async def aclose(self) -> None:
		await self._client.aclose()
