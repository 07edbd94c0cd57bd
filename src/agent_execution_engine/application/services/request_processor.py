"""Request processor: route a raw request and run the conversation loop on the chosen model."""

import logging

from agent_execution_engine.application.factories.model_registry import ModelRegistry
from agent_execution_engine.application.services.conversation_loop import (
    ConversationLoopController,
    LoopOptions,
)
from agent_execution_engine.application.services.request_router import RequestRouter
from agent_execution_engine.domain.cancellation import CancellationToken
from agent_execution_engine.domain.interfaces import IProgressSink
from agent_execution_engine.domain.models import ConversationThread, ExecutionResult

logger = logging.getLogger(__name__)


class AgentRequestProcessor:
    """Entry point that turns "turn#context#category" requests into execution results."""

    def __init__(
        self,
        registry: ModelRegistry,
        router: RequestRouter | None = None,
        progress_sink: IProgressSink | None = None,
        options: LoopOptions | None = None,
    ):
        self._registry = registry
        self._router = router or RequestRouter(registry)
        self._progress_sink = progress_sink
        self._options = options or LoopOptions()

    @property
    def router(self) -> RequestRouter:
        return self._router

    async def process(
        self,
        raw_request: str,
        session_id: str,
        cancellation: CancellationToken | None = None,
        thread: ConversationThread | None = None,
    ) -> ExecutionResult:
        """
        Route a raw request and execute it.

        Args:
            raw_request: Raw request "turn#context#category"
            session_id: Receiver of progress events
            cancellation: Optional cancellation signal
            thread: Thread to continue; a new one is created when None

        Returns:
            ExecutionResult of the conversation loop

        Raises:
            ConfigurationError: If the resolved model is not registered
        """
        routed = self._router.route(raw_request)
        model_name = routed.model_config.name
        logger.info("Processing '%s' request for session %s with model %s", routed.category, session_id, model_name)

        async with self._registry.create_provider(model_name) as provider:
            controller = ConversationLoopController(
                provider=provider,
                progress_sink=self._progress_sink,
                options=self._options,
            )
            return await controller.run(
                thread=thread if thread is not None else ConversationThread(),
                system_message=routed.system_message,
                dialogue_turn=routed.dialogue_turn,
                session_id=session_id,
                cancellation=cancellation,
            )
