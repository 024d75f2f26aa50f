from __future__ import annotations
import asyncio
import logging
import httpx
from typing import Any, Dict, List, Optional
from .settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class GeminiError(RuntimeError):
	def __init__(self, message: str, *, status_code: Optional[int] = None, body: str = "") -> None:
		super().__init__(message)
		self.status_code = status_code
		self.body = body


def _is_overloaded(response: httpx.Response) -> bool:
	if response.status_code == 503:
		return True
	try:
		return "overloaded" in response.text.lower()
	except Exception:
		return False


def _as_gemini_error(err: Exception) -> GeminiError:
	if isinstance(err, GeminiError):
		return err
	if isinstance(err, httpx.HTTPStatusError):
		body = err.response.text
		return GeminiError(f"Gemini returned HTTP {err.response.status_code}: {body[:500]}", status_code=err.response.status_code, body=body)
	return GeminiError(f"Gemini request failed: {err}")


class GeminiClient:
	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		app_settings: Optional[Settings] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		cfg = app_settings or default_settings
		self.api_key = api_key or cfg.gemini_api_key
		if not self.api_key:
			raise ValueError("GEMINI_API_KEY is not configured")
		self.model = model or cfg.gemini_model
		self.provider = cfg.gemini_provider
		self.max_attempts = max(1, cfg.gemini_max_attempts)
		self.initial_backoff = cfg.gemini_initial_backoff_seconds
		if self.provider == "vertex":
			region = cfg.vertex_region
			project = cfg.vertex_project or "placeholder-project"
			# Vertex AI Generative REST endpoint (API key via header)
			self.base_url = base_url or (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
			)
			self._auth_in_query = False
		else:
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
			self._auth_in_query = True
		self._client = httpx.AsyncClient(timeout=30, transport=transport)
		self._fallback_client: Optional[httpx.AsyncClient] = None
		self._fallback_enabled = bool(cfg.openrouter_api_key)
		self._openrouter_api_key = cfg.openrouter_api_key
		self._openrouter_model = cfg.openrouter_model
		self._openrouter_base_url = cfg.openrouter_base_url
		self._openrouter_headers = {
			"Authorization": f"Bearer {self._openrouter_api_key}" if self._openrouter_api_key else "",
			"Content-Type": "application/json",
			"HTTP-Referer": cfg.openrouter_referer,
			"X-Title": cfg.openrouter_title,
		}
		if self._fallback_enabled:
			self._fallback_client = httpx.AsyncClient(timeout=30, transport=transport)

	async def generate(self, prompt: str, *, system_instruction: Optional[str] = None, temperature: Optional[float] = None) -> str:
		return await self.generate_chat(
			[{"role": "user", "text": prompt}],
			system_instruction=system_instruction,
			temperature=temperature,
		)

	async def generate_chat(
		self,
		turns: List[Dict[str, str]],
		*,
		system_instruction: Optional[str] = None,
		temperature: Optional[float] = None,
	) -> str:
		"""Send a conversation; each turn is {"role": "user" | "model", "text": ...}."""
		payload: Dict[str, Any] = {
			"contents": [{"role": t["role"], "parts": [{"text": t["text"]}]} for t in turns],
		}
		if system_instruction:
			payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
		if temperature is not None:
			payload["generationConfig"] = {"temperature": temperature}
		return await self._post_payload(payload, turns=turns, system_instruction=system_instruction)

	async def _post_payload(
		self,
		payload: Dict[str, Any],
		*,
		turns: List[Dict[str, str]],
		system_instruction: Optional[str],
	) -> str:
		params: Dict[str, Any] = {}
		headers: Dict[str, str] = {}
		if self._auth_in_query:
			params["key"] = self.api_key
		else:
			headers["x-goog-api-key"] = self.api_key
		last_error: Optional[Exception] = None
		r: Optional[httpx.Response] = None
		delay = self.initial_backoff
		for attempt in range(1, self.max_attempts + 1):
			try:
				r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
				r.raise_for_status()
				last_error = None
				break
			except httpx.HTTPStatusError as http_err:
				last_error = http_err
				if _is_overloaded(http_err.response) and attempt < self.max_attempts:
					logger.info("Model overloaded, retrying in %.2fs (attempt %d/%d)", delay, attempt, self.max_attempts)
					await asyncio.sleep(delay)
					delay *= 2
					continue
				break
			except httpx.RequestError as net_err:
				last_error = net_err
				break
		if last_error is None and r is not None:
			try:
				data = r.json()
				parts = data["candidates"][0]["content"]["parts"]
				text = "".join(p.get("text", "") for p in parts)
				if text.strip():
					return text
				last_error = GeminiError("Gemini returned an empty response")
			except Exception:
				last_error = GeminiError(f"Unexpected Gemini response: {r.text}")
		if not self._fallback_enabled:
			raise _as_gemini_error(last_error or GeminiError("Gemini call failed and no fallback configured"))
		return await self._fallback_generate(turns, system_instruction, last_error)

	async def aclose(self) -> None:
		await self._client.aclose()
		if self._fallback_client is not None:
			await self._fallback_client.aclose()

	async def _fallback_generate(
		self,
		turns: List[Dict[str, str]],
		system_instruction: Optional[str],
		primary_error: Optional[Exception],
	) -> str:
		if not self._fallback_client or not self._openrouter_api_key:
			raise _as_gemini_error(primary_error or GeminiError("Fallback requested but OpenRouter is not configured"))
		headers = {k: v for k, v in self._openrouter_headers.items() if v}
		messages: List[Dict[str, str]] = []
		if system_instruction:
			messages.append({"role": "system", "content": system_instruction})
		for t in turns:
			messages.append({"role": "assistant" if t["role"] == "model" else "user", "content": t["text"]})
		payload: Dict[str, Any] = {
			"model": self._openrouter_model,
			"messages": messages,
		}
		logger.warning("Gemini call failed (%s); falling back to OpenRouter", primary_error)
		try:
			r = await self._fallback_client.post(
				self._openrouter_base_url,
				headers=headers,
				json=payload,
			)
			r.raise_for_status()
			data = r.json()
			return data["choices"][0]["message"]["content"]
		except Exception as fallback_err:
			primary = _as_gemini_error(primary_error) if primary_error is not None else None
			raise GeminiError(
				f"Gemini primary call failed ({primary_error}); fallback via OpenRouter also failed",
				status_code=primary.status_code if primary else None,
				body=primary.body if primary else "",
			) from fallback_err
