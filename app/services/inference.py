import asyncio
import copy
import json
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict
from pypdf import PdfReader

from app.core.config import Settings
from app.core.errors import FeedbackParseFailed, InferenceFailed
from app.services.instructions import FEEDBACK_CATEGORIES

CODE_FENCE_PATTERN = re.compile(r"^\s*```(?:json)?\s*\n?(?P<body>.*?)\n?\s*```\s*$", re.DOTALL | re.IGNORECASE)
JOB_TITLE_PATTERN = re.compile(r"^Job title:\s*(?P<title>.+)$", re.MULTILINE)


class ContentPart(BaseModel):
    model_config = ConfigDict(extra="allow")

    text: str = ""


class InferenceMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    content: str | list[ContentPart]


class InferenceResponse(BaseModel):
    """Inference reply whose content is either plain text or a sequence of text parts."""

    model_config = ConfigDict(extra="allow")

    message: InferenceMessage


def response_text(response: InferenceResponse) -> str:
    content = response.message.content
    if isinstance(content, str):
        return content
    if not content:
        raise FeedbackParseFailed("The AI analysis returned no content parts.")
    return content[0].text


def parse_feedback(text: str) -> Any:
    fenced = CODE_FENCE_PATTERN.match(text or "")
    body = fenced.group("body") if fenced else text
    try:
        return json.loads(body)
    except (TypeError, ValueError) as exc:
        raise FeedbackParseFailed(f"Failed to parse AI feedback: {exc}") from exc


def extract_resume_text(pdf_path: Path, *, max_chars: int) -> str:
    reader = PdfReader(str(pdf_path))
    pages = [(page.extract_text() or "").strip() for page in reader.pages]
    text = "\n\n".join(page for page in pages if page)
    return text[:max_chars]


class InferenceProvider(ABC):
    @abstractmethod
    async def feedback(self, artifact_path: str, instructions: str) -> InferenceResponse | None:
        raise NotImplementedError


class MockInferenceProvider(InferenceProvider):
    async def feedback(self, artifact_path: str, instructions: str) -> InferenceResponse | None:
        match = JOB_TITLE_PATTERN.search(instructions or "")
        role = match.group("title").strip() if match else "the target role"
        category = {
            "score": 70,
            "tips": [
                {
                    "type": "improve",
                    "tip": f"Tailor this section to {role}",
                    "explanation": "Mirror the wording of the job description where it is truthful.",
                }
            ],
        }
        payload: dict[str, Any] = {"overallScore": 70}
        for name in FEEDBACK_CATEGORIES:
            payload[name] = copy.deepcopy(category)
        payload["ATS"]["tips"] = [{"type": "good", "tip": "Resume text is machine readable"}]
        return InferenceResponse(message=InferenceMessage(content=json.dumps(payload)))


class OpenAICompatibleInferenceProvider(InferenceProvider):
    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str,
        temperature: float,
        max_tokens: int,
        timeout_seconds: int,
        resume_text_max_chars: int = 20000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("LLM_API_KEY is required when LLM_PROVIDER=openai")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds
        self.resume_text_max_chars = resume_text_max_chars
        self.transport = transport

    async def feedback(self, artifact_path: str, instructions: str) -> InferenceResponse | None:
        resume_text = await asyncio.to_thread(
            extract_resume_text, Path(artifact_path), max_chars=self.resume_text_max_chars
        )
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": "You are a meticulous resume reviewer. Reply with JSON only."},
                {"role": "user", "content": f"{instructions}\n\nResume:\n{resume_text}"},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
                response = await client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            raise InferenceFailed(f"LLM request failed: {exc.__class__.__name__}: {exc}") from exc

        if response.status_code >= 400:
            raise InferenceFailed(f"LLM request failed ({response.status_code}): {response.text[:300]}")

        try:
            data = response.json()
        except ValueError as exc:
            raise InferenceFailed(f"LLM returned a non-JSON body: {response.text[:300]}") from exc
        if not isinstance(data, dict):
            raise InferenceFailed("LLM returned an unexpected response shape.")
        choices = data.get("choices") or []
        if not choices:
            return None
        content = (choices[0].get("message") or {}).get("content")
        if not content:
            return None
        return InferenceResponse.model_validate({"message": {"content": content}})


def build_inference_provider(settings: Settings) -> InferenceProvider:
    raw_provider = (settings.llm_provider or "mock").strip()
    provider = raw_provider.lower()

    if provider.startswith("sk-") or provider.startswith("gsk_"):
        raise ValueError(
            "LLM_PROVIDER appears to contain an API key. Set LLM_PROVIDER to 'openai' or 'groq' "
            "and move the key to LLM_API_KEY."
        )

    if provider == "mock":
        return MockInferenceProvider()

    base_url = settings.llm_base_url
    if provider == "groq" and (not base_url or base_url == "https://api.openai.com/v1"):
        base_url = "https://api.groq.com/openai/v1"
    if provider in {"openai", "openai_compatible", "groq"}:
        return OpenAICompatibleInferenceProvider(
            api_key=settings.llm_api_key,
            model=settings.llm_model,
            base_url=base_url,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            timeout_seconds=settings.llm_timeout_seconds,
            resume_text_max_chars=settings.resume_text_max_chars,
        )
    raise ValueError("Unsupported LLM_PROVIDER. Supported values: mock, openai, groq.")
