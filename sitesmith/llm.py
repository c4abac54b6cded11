import os
import json
import time
import logging
from typing import AsyncIterator, List, Optional

import httpx
from openai import AsyncOpenAI, APIError

from .errors import GatewayError
from .interfaces import IModelGateway, GatewayRequest

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_HOST = "http://127.0.0.1:11434"
JSON_INSTRUCTION = "Return ONLY valid JSON as the final output without extra commentary."


def default_timeout() -> httpx.Timeout:
    # Generation can take minutes on local hardware; connect failures should not.
    return httpx.Timeout(connect=30.0, read=300.0, write=300.0, pool=30.0)


class OllamaGateway(IModelGateway):
    """
    Talks to an Ollama-style model service.

    Non-streaming calls POST /api/generate and read the `response` field.
    Streaming calls read line-delimited JSON records; a line that is not
    JSON is passed through as a raw text delta.
    """

    def __init__(self, host: Optional[str] = None, http_client: Optional[httpx.AsyncClient] = None,
                 timeout: Optional[httpx.Timeout] = None):
        self.host = (host or os.environ.get("OLLAMA_HOST") or DEFAULT_OLLAMA_HOST).rstrip("/")
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(timeout=timeout or default_timeout())

    def _payload(self, request: GatewayRequest, stream: bool) -> dict:
        prompt = request.prompt
        if request.json_mode:
            prompt = f"{JSON_INSTRUCTION}\n\n{prompt}"
        payload = {"model": request.model_id, "prompt": prompt, "stream": stream}
        if request.system_preamble:
            payload["system"] = request.system_preamble
        if request.json_mode:
            payload["format"] = "json"
        return payload

    @staticmethod
    async def _raise_for_status(response: httpx.Response):
        if response.is_success:
            return
        await response.aread()
        detail = response.text.strip()
        raise GatewayError(detail or f"Model service error ({response.status_code})",
                           status_code=response.status_code)

    async def complete(self, request: GatewayRequest) -> str:
        url = f"{self.host}/api/generate"
        logger.debug(f"🔄 [LLM] complete() calling {request.model_id}... (prompt_len={len(request.prompt)})")
        t0 = time.time()
        try:
            response = await self.client.post(url, json=self._payload(request, stream=False))
        except httpx.HTTPError as e:
            raise GatewayError(f"Model service unreachable at {self.host}: {e}") from e
        await self._raise_for_status(response)

        try:
            data = response.json()
        except ValueError:
            # Some proxies answer with plain text.
            return response.text
        if isinstance(data, dict) and data.get("error"):
            raise GatewayError(str(data["error"]), status_code=response.status_code)
        content = data.get("response", "") if isinstance(data, dict) else ""
        logger.debug(f"✅ [LLM] complete() returned in {time.time() - t0:.1f}s (response_len={len(content)})")
        return content or ""

    async def stream(self, request: GatewayRequest) -> AsyncIterator[str]:
        url = f"{self.host}/api/generate"
        logger.debug(f"🔄 [LLM] stream() calling {request.model_id}... (prompt_len={len(request.prompt)})")
        try:
            async with self.client.stream("POST", url, json=self._payload(request, stream=True)) as response:
                await self._raise_for_status(response)
                async for line in response.aiter_lines():
                    if not line.strip():
                        continue
                    try:
                        record = json.loads(line)
                    except json.JSONDecodeError:
                        yield line + "\n"
                        continue
                    if not isinstance(record, dict):
                        yield line + "\n"
                        continue
                    if record.get("error"):
                        raise GatewayError(str(record["error"]))
                    delta = record.get("response")
                    if delta:
                        yield delta
                    if record.get("done"):
                        return
        except httpx.HTTPError as e:
            raise GatewayError(f"Model stream from {self.host} failed: {e}") from e

    async def list_models(self) -> List[str]:
        try:
            response = await self.client.get(f"{self.host}/api/tags")
        except httpx.HTTPError as e:
            raise GatewayError(f"Model service unreachable at {self.host}: {e}") from e
        await self._raise_for_status(response)
        try:
            data = response.json()
        except ValueError as e:
            raise GatewayError(f"Model list from {self.host} was not JSON", status_code=response.status_code) from e
        models = data.get("models", []) if isinstance(data, dict) else []
        return [m.get("name") or m.get("model") for m in models if isinstance(m, dict) and (m.get("name") or m.get("model"))]

    async def aclose(self):
        if self._owns_client:
            await self.client.aclose()


class OpenAICompatibleGateway(IModelGateway):
    """
    Gateway for OpenAI-compatible endpoints (vLLM, TGI, hosted APIs).
    JSON mode maps to response_format={"type": "json_object"}.
    """

    def __init__(self, base_url: str, api_key: str = "EMPTY", http_client: Optional[httpx.AsyncClient] = None,
                 temperature: float = 0.2, client: Optional[AsyncOpenAI] = None):
        self.base_url = base_url
        self.temperature = temperature
        self._http_client = http_client
        self.client = client or AsyncOpenAI(
            base_url=base_url,
            api_key=api_key,
            http_client=http_client or httpx.AsyncClient(timeout=default_timeout()),
        )

    def _messages(self, request: GatewayRequest) -> list:
        messages = []
        if request.system_preamble:
            messages.append({"role": "system", "content": request.system_preamble})
        messages.append({"role": "user", "content": request.prompt})
        return messages

    def _options(self, request: GatewayRequest) -> dict:
        options = {
            "model": request.model_id,
            "messages": self._messages(request),
            "temperature": self.temperature,
        }
        if request.json_mode:
            options["response_format"] = {"type": "json_object"}
        return options

    async def complete(self, request: GatewayRequest) -> str:
        logger.debug(f"🔄 [LLM] complete() calling {request.model_id}... (prompt_len={len(request.prompt)})")
        t0 = time.time()
        try:
            response = await self.client.chat.completions.create(**self._options(request))
        except APIError as e:
            raise GatewayError(str(e), status_code=getattr(e, "status_code", None)) from e
        if not response.choices:
            raise GatewayError(f"Model {request.model_id} returned no choices")
        content = response.choices[0].message.content or ""
        logger.debug(f"✅ [LLM] complete() returned in {time.time() - t0:.1f}s (response_len={len(content)})")
        return content

    async def stream(self, request: GatewayRequest) -> AsyncIterator[str]:
        logger.debug(f"🔄 [LLM] stream() calling {request.model_id}... (prompt_len={len(request.prompt)})")
        try:
            chunks = await self.client.chat.completions.create(stream=True, **self._options(request))
            async for chunk in chunks:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    yield delta
        except APIError as e:
            raise GatewayError(str(e), status_code=getattr(e, "status_code", None)) from e

    async def list_models(self) -> List[str]:
        try:
            models = await self.client.models.list()
        except APIError as e:
            raise GatewayError(str(e), status_code=getattr(e, "status_code", None)) from e
        return [m.id for m in models.data]

    async def aclose(self):
        await self.client.close()
