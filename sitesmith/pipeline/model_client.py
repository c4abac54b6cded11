"""
Run-scoped model access.
========================
Wraps the gateway for one run: applies the brief's model and preamble,
enforces the per-call deadline, and feeds streamed output into the run's
LiveStream.
"""
import asyncio
import contextlib
from typing import Any, Dict, Optional

from ..domain import SiteBrief
from ..errors import ModelCallTimeout
from ..interfaces import GatewayRequest, IModelGateway
from ..prompts.library import JSON_SYSTEM_PROMPT, DEFAULT_SYSTEM_PREAMBLE
from ..streaming import LiveStream
from ..thinking import ThinkingExtraction, parse_json_object, strip_thinking


class RunModelClient:
    """
    Model calls for a single run.

    JSON calls are non-streaming and return the parsed object (or None).
    Text calls stream and return the final ThinkingExtraction of the
    whole buffer. Both raise ModelCallTimeout when `call_timeout` elapses
    and GatewayError when the service fails.
    """

    def __init__(self, gateway: IModelGateway, brief: SiteBrief, live: LiveStream,
                 call_timeout: Optional[float] = None):
        self.gateway = gateway
        self.brief = brief
        self.live = live
        self.call_timeout = call_timeout
        self.calls = 0

    def _with_preamble(self, prompt: str) -> str:
        preamble = (self.brief.system_preamble or "").strip()
        return f"{preamble}\n\n{prompt}" if preamble else prompt

    async def prompt_json(self, prompt: str, *, phase: str, label: str = "",
                          system_prompt: str = JSON_SYSTEM_PROMPT) -> Optional[Dict[str, Any]]:
        request = GatewayRequest(
            model_id=self.brief.model_id,
            prompt=self._with_preamble(prompt),
            system_preamble=system_prompt,
            json_mode=True,
        )
        self.live.begin(phase, label)
        self.calls += 1
        try:
            async with asyncio.timeout(self.call_timeout):
                raw = await self.gateway.complete(request)
        except TimeoutError as e:
            raise ModelCallTimeout(phase, self.call_timeout) from e
        self.live.feed(raw)
        return parse_json_object(raw)

    async def stream_text(self, prompt: str, *, phase: str, label: str = "") -> ThinkingExtraction:
        request = GatewayRequest(
            model_id=self.brief.model_id,
            prompt=prompt,
            system_preamble=(self.brief.system_preamble or "").strip() or DEFAULT_SYSTEM_PREAMBLE,
            stream=True,
        )
        self.live.begin(phase, label)
        self.calls += 1
        raw_parts = []
        try:
            async with asyncio.timeout(self.call_timeout):
                async with contextlib.aclosing(self.gateway.stream(request)) as chunks:
                    async for chunk in chunks:
                        raw_parts.append(chunk)
                        self.live.feed(chunk)
        except TimeoutError as e:
            raise ModelCallTimeout(phase, self.call_timeout) from e
        return strip_thinking("".join(raw_parts))
