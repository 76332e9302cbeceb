"""Run one question through an OpenAI assistant, answering its tool calls along the way."""
from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import openai

from .config import Settings
from .errors import InvalidModel, MissingAssistant, MissingModel, MissingPromptOrModel, RunTimeout
from .pricing import PRICING, estimate_cost
from .tools import DEFAULT_TOOLS, ToolRegistry, default_registry

ResponseFormat = Union[str, Dict[str, str]]


@dataclass
class Session:
    thread_id: Optional[str] = None
    cost: float = 0.0
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class AssistResult:
    reply: str
    session: Session
    outputs: List[Any] = field(default_factory=list)


def create_client(settings: Settings) -> openai.AsyncOpenAI:
    return openai.AsyncOpenAI(api_key=settings.openai_api_key)


class AgentRunner:
    """
    Create-or-reuse an assistant, start a run on a thread and poll it to completion.

    Tool calls requested by the run are resolved concurrently through the
    registry and submitted back as one batch per `requires_action` state.
    """

    def __init__(
        self,
        client: openai.AsyncOpenAI,
        registry: Optional[ToolRegistry] = None,
        assistant_id: Optional[str] = None,
        poll_interval: float = 1.0,
        max_polls: Optional[int] = None,
    ):
        self.client = client
        self.registry = registry or default_registry()
        self.assistant_id = assistant_id
        self.poll_interval = poll_interval
        self.max_polls = max_polls

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[openai.AsyncOpenAI] = None) -> "AgentRunner":
        return cls(
            client or create_client(settings),
            assistant_id=settings.assistant_id,
            poll_interval=settings.poll_interval,
            max_polls=settings.max_polls,
        )

    async def close(self) -> None:
        await self.client.close()

    async def assist(
        self,
        model: str,
        prompt: Optional[str] = None,
        instructions: Optional[str] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        thread_id: Optional[str] = None,
        assistant_id: Optional[str] = None,
        assistant_name: Optional[str] = None,
        response_format: Optional[ResponseFormat] = None,
    ) -> AssistResult:
        if model not in PRICING:
            raise InvalidModel(f"Invalid model: {model}")
        if tools is None:
            tools = DEFAULT_TOOLS
        assistant_id = assistant_id or self.assistant_id
        assistant_name = assistant_name or f"assistant-{int(time.time())}"
        session = Session()

        if instructions:
            if assistant_id:
                await self.client.beta.assistants.update(assistant_id, instructions=instructions)
            else:
                if not model:
                    raise MissingModel("model is required")
                assistant = await self.client.beta.assistants.create(
                    model=model, instructions=instructions, name=assistant_name, tools=tools
                )
                assistant_id = assistant.id
                logging.info("Created assistant %s (%s)", assistant_name, assistant_id)

        if not assistant_id:
            raise MissingAssistant("assistant_id is required")

        extra: Dict[str, Any] = {}
        if response_format is not None:
            extra["response_format"] = response_format

        if thread_id:
            await self.client.beta.threads.messages.create(thread_id, role="user", content=prompt)
            run = await self.client.beta.threads.runs.create(thread_id, assistant_id=assistant_id, tools=tools, **extra)
        else:
            if not model or not prompt:
                raise MissingPromptOrModel("model and prompt are required")
            run = await self.client.beta.threads.create_and_run(
                assistant_id=assistant_id,
                model=model,
                tools=tools,
                thread={"messages": [{"role": "user", "content": prompt}]},
                **extra,
            )
        logging.info("Started run %s on thread %s", run.id, run.thread_id)

        outputs: List[Any] = []
        run = await self._poll(run, outputs)

        messages = await self.client.beta.threads.messages.list(run.thread_id)
        reply = messages.data[0].content[0].text.value

        session.thread_id = run.thread_id
        session.cost += estimate_cost(model, run.usage.prompt_tokens, run.usage.completion_tokens)
        session.input_tokens += run.usage.prompt_tokens
        session.output_tokens += run.usage.completion_tokens
        logging.info(
            "Run %s completed: %d in / %d out tokens, $%.6f",
            run.id,
            session.input_tokens,
            session.output_tokens,
            session.cost,
        )
        return AssistResult(reply=reply, session=session, outputs=outputs)

    async def _poll(self, run, outputs: List[Any]):
        polls = 0
        while run.status != "completed":
            if self.max_polls is not None and polls >= self.max_polls:
                raise RunTimeout(f"Run {run.id} not completed after {polls} polls (status={run.status})")
            polls += 1
            await asyncio.sleep(self.poll_interval)
            run = await self.client.beta.threads.runs.retrieve(run.id, thread_id=run.thread_id)

            if run.status == "requires_action" and run.required_action:
                tool_outputs = await self._resolve_tool_calls(
                    run.required_action.submit_tool_outputs.tool_calls, outputs
                )
                run = await self.client.beta.threads.runs.submit_tool_outputs(
                    run.id, thread_id=run.thread_id, tool_outputs=tool_outputs
                )
        return run

    async def _resolve_tool_calls(self, tool_calls, outputs: List[Any]) -> List[Dict[str, str]]:
        results = await asyncio.gather(
            *[self.registry.dispatch(call.function.name, call.function.arguments) for call in tool_calls]
        )
        outputs.extend(results)
        return [
            {"tool_call_id": call.id, "output": json.dumps(result)}
            for call, result in zip(tool_calls, results)
        ]
