"""Chat completion provider backed by llama-cpp-python."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import asynccontextmanager
from typing import Any

from agent_execution_engine.domain.cancellation import CancellationToken
from agent_execution_engine.domain.exceptions import ConfigurationError, ProviderError
from agent_execution_engine.domain.interfaces import IChatCompletionProvider
from agent_execution_engine.domain.models import (
    ChatOptions,
    ChatRole,
    FunctionResultContent,
    Message,
    ModelConfig,
    ResponseFragment,
    TextContent,
    UsageContent,
    UsageDetails,
)

logger = logging.getLogger(__name__)

ModelLoader = Callable[..., Any]


def _load_llama(**kwargs: Any) -> Any:
    try:
        from llama_cpp import Llama
    except ImportError as e:
        raise ConfigurationError(
            "llama-cpp-python is not installed; install the 'llama' extra to serve local models"
        ) from e
    return Llama(**kwargs)


def _usage_from(raw: dict[str, Any] | None) -> UsageDetails | None:
    if not raw:
        return None
    return UsageDetails(
        input_tokens=raw.get("prompt_tokens"),
        output_tokens=raw.get("completion_tokens"),
        total_tokens=raw.get("total_tokens"),
    )


class LlamaCppChatProvider(IChatCompletionProvider):
    """
    Serves one local GGUF model through llama.cpp.

    Weights are loaded on first use and kept until aclose(). Each call runs in
    its own inference scope: the model state is reset when the call ends,
    including on cancellation and errors. Calls are serialized because a
    llama.cpp context is not safe for concurrent use.
    """

    def __init__(self, config: ModelConfig, loader: ModelLoader | None = None):
        self._config = config
        self._loader = loader or _load_llama
        self._llm: Any = None
        self._lock = asyncio.Lock()

    @property
    def model_name(self) -> str:
        return self._config.name

    @property
    def is_loaded(self) -> bool:
        return self._llm is not None

    def llama_kwargs(self) -> dict[str, Any]:
        """Constructor arguments for llama_cpp.Llama."""
        return {
            "model_path": self._config.model_path,
            "n_ctx": self._config.context_size or 0,
            "n_gpu_layers": self._config.gpu_layer_count,
            "main_gpu": self._config.main_gpu,
            "n_threads": self._config.resolved_threads,
            "n_batch": self._config.batch_size,
            "n_ubatch": self._config.ubatch_size,
            "use_mmap": True,
            "use_mlock": True,
            "flash_attn": True,
            "embedding": False,
            "verbose": False,
        }

    @staticmethod
    def completion_kwargs(options: ChatOptions | None) -> dict[str, Any]:
        """Map chat options to create_chat_completion arguments; unset options are omitted."""
        if options is None:
            return {}
        kwargs: dict[str, Any] = {}
        if options.max_output_tokens is not None:
            kwargs["max_tokens"] = options.max_output_tokens
        if options.temperature is not None:
            kwargs["temperature"] = options.temperature
        if options.top_p is not None:
            kwargs["top_p"] = options.top_p
        if options.stop_sequences:
            kwargs["stop"] = list(options.stop_sequences)
        return kwargs

    @staticmethod
    def to_llama_messages(messages: Sequence[Message]) -> list[dict[str, str]]:
        """Convert the history to llama.cpp chat messages."""
        converted = []
        for message in messages:
            content = message.text
            if not content and message.role == ChatRole.TOOL:
                content = "\n".join(
                    str(item.result) for item in message.contents if isinstance(item, FunctionResultContent)
                )
            converted.append({"role": message.role.value, "content": content})
        return converted

    async def get_response(
        self,
        messages: Sequence[Message],
        options: ChatOptions | None = None,
        cancellation: CancellationToken | None = None,
    ) -> Message:
        """Complete the history in one call."""
        if not messages:
            return Message(role=ChatRole.ASSISTANT)

        async with self._inference_scope(cancellation) as llm:
            response = await asyncio.to_thread(
                llm.create_chat_completion,
                messages=self.to_llama_messages(messages),
                **self.completion_kwargs(options),
            )

        choice = response["choices"][0]["message"]
        contents: list = [TextContent(text=choice.get("content") or "")]
        usage = _usage_from(response.get("usage"))
        if usage is not None:
            contents.append(UsageContent(details=usage))
        return Message(role=ChatRole.ASSISTANT, contents=tuple(contents), message_id=response.get("id"))

    async def get_streaming_response(
        self,
        messages: Sequence[Message],
        options: ChatOptions | None = None,
        cancellation: CancellationToken | None = None,
    ) -> AsyncIterator[ResponseFragment]:
        """Stream the completion chunk by chunk."""
        if not messages:
            return

        async with self._inference_scope(cancellation) as llm:
            chunks = await asyncio.to_thread(
                llm.create_chat_completion,
                messages=self.to_llama_messages(messages),
                stream=True,
                **self.completion_kwargs(options),
            )
            try:
                while True:
                    if cancellation is not None:
                        cancellation.raise_if_cancelled()
                    chunk = await self._pull(chunks)
                    if chunk is None:
                        break
                    fragment = self._chunk_to_fragment(chunk)
                    if fragment is not None:
                        yield fragment
            finally:
                close = getattr(chunks, "close", None)
                if close is not None:
                    close()

    @staticmethod
    async def _pull(chunks: Any) -> dict[str, Any] | None:
        pending = asyncio.ensure_future(asyncio.to_thread(next, chunks, None))
        try:
            return await asyncio.shield(pending)
        except asyncio.CancelledError:
            # The worker must leave the llama context before it is reset.
            await asyncio.wait({pending})
            raise

    @staticmethod
    def _chunk_to_fragment(chunk: dict[str, Any]) -> ResponseFragment | None:
        contents: list = []
        role = None
        for choice in chunk.get("choices", []):
            delta = choice.get("delta") or {}
            if delta.get("role"):
                role = ChatRole(delta["role"])
            if delta.get("content"):
                contents.append(TextContent(text=delta["content"]))
        usage = _usage_from(chunk.get("usage"))
        if usage is not None:
            contents.append(UsageContent(details=usage))

        if role is None and not contents:
            return None
        return ResponseFragment(role=role or ChatRole.ASSISTANT, contents=tuple(contents), response_id=chunk.get("id"))

    @asynccontextmanager
    async def _inference_scope(self, cancellation: CancellationToken | None):
        async with self._lock:
            if cancellation is not None:
                cancellation.raise_if_cancelled()
            llm = await self._ensure_loaded()
            try:
                yield llm
            finally:
                llm.reset()

    async def _ensure_loaded(self) -> Any:
        if self._llm is None:
            logger.info("Loading model '%s' from %s", self._config.name, self._config.model_path)
            try:
                self._llm = await asyncio.to_thread(self._loader, **self.llama_kwargs())
            except ConfigurationError:
                raise
            except Exception as e:
                raise ProviderError(
                    f"Failed to load model '{self._config.name}': {e}", model_name=self._config.name
                ) from e
        return self._llm

    async def aclose(self) -> None:
        """Release the loaded weights."""
        if self._llm is not None:
            llm, self._llm = self._llm, None
            await asyncio.to_thread(llm.close)
            logger.info("Released model '%s'", self._config.name)
