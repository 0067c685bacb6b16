"""
Model-backed explanation of traces and spans, with follow-up questions.

Each analysis runs inside a session. The first call creates the session and
stores the task's system prompt as its first message; later calls replay the
stored history so the model keeps context. The session lock is never held
while the model is answering; the user turn and the answer are stored
together only after the model returns.
"""

import logging
from typing import List, Tuple

from .errors import NotFoundError, ProviderError, ValidationError
from .llm_providers import BaseChatModel, ChatMessage, ChatRole
from .sessions import MessageRole, Session, SessionManager


logger = logging.getLogger(__name__)


SPAN_ANALYSIS_SYSTEM_PROMPT = """You are an expert distributed systems engineer analyzing trace data from Jaeger, a distributed tracing platform.

Your task is to analyze a single span and provide a clear, concise explanation of:
1. What this span represents (the operation it performs)
2. Whether it completed successfully or failed, and why
3. Any performance concerns (is the duration unusually long?)
4. Key attributes that indicate important behavior
5. Any events/logs that provide additional context

Keep your response concise and actionable. Focus on what would help a developer debug or understand this span.
Do NOT make up information that is not present in the span data.
If you see error status or error-related attributes, highlight them prominently."""

TRACE_ANALYSIS_SYSTEM_PROMPT = """You are an expert distributed systems engineer analyzing trace data from Jaeger, a distributed tracing platform.

Your task is to analyze a complete distributed trace and provide:
1. A high-level summary of the request flow across services
2. The critical path (which spans contribute most to total latency)
3. Any errors or failures and their likely root cause
4. Performance bottlenecks (spans with disproportionately long durations)
5. Service interaction patterns (which services call which)

Keep your response structured and actionable. Use the span hierarchy (parent-child relationships) to understand the call flow.
Do NOT make up information that is not present in the trace data.
Highlight the most important findings first."""

SPAN_PROMPT_PREFIX = "Explain this span:\n\n"
TRACE_PROMPT_PREFIX = "Analyze this trace:\n\n"

# Stored role -> role the model sees; anything unrecognised is treated as user input
_ROLE_MAP = {
    MessageRole.SYSTEM: ChatRole.SYSTEM,
    MessageRole.ASSISTANT: ChatRole.AI,
}


class Analyzer:
    """
    Explains traces and spans using a chat model.

    Args:
        model: Chat model shared with the extractor
        sessions: Session store shared with other components
        temperature: Sampling temperature for analysis calls
        max_tokens: Output budget for analysis calls
    """

    def __init__(
        self,
        model: BaseChatModel,
        sessions: SessionManager,
        temperature: float = 0.0,
        max_tokens: int = 512,
    ):
        self.model = model
        self.sessions = sessions
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def analyze_span(self, span_text: str, session_id: str = "") -> Tuple[str, str]:
        """Explain a rendered span. Returns (analysis, session_id)."""
        return await self._analyze(SPAN_ANALYSIS_SYSTEM_PROMPT, SPAN_PROMPT_PREFIX + span_text, session_id)

    async def analyze_trace(self, trace_text: str, session_id: str = "") -> Tuple[str, str]:
        """Explain a rendered trace. Returns (analysis, session_id)."""
        return await self._analyze(TRACE_ANALYSIS_SYSTEM_PROMPT, TRACE_PROMPT_PREFIX + trace_text, session_id)

    async def follow_up(self, question: str, session_id: str) -> str:
        """
        Ask a question in an existing session.

        Never creates a session.

        Raises:
            ValidationError: session_id is empty
            NotFoundError: the session is absent or expired
            ProviderError: the model call failed
        """
        if not session_id:
            raise ValidationError("session_id is required for follow-up questions")

        session = self.sessions.get(session_id)
        if session is None:
            raise NotFoundError("session not found or expired")

        response = await self._call_model(build_messages(session, question))
        self._persist(session_id, question, response)
        return response

    async def _analyze(self, system_prompt: str, user_prompt: str, session_id: str) -> Tuple[str, str]:
        created = False
        if session_id:
            session = self.sessions.get(session_id)
            if session is None:
                raise NotFoundError("session not found or expired")
        else:
            session = self.sessions.create()
            created = True
            self.sessions.add_message(session.id, MessageRole.SYSTEM, system_prompt)
            session = self.sessions.get(session.id)
            if session is None:
                raise NotFoundError("session expired before analysis started")

        try:
            response = await self._call_model(build_messages(session, user_prompt))
        except BaseException:
            # A session this call created holds nothing but the prompt; drop it
            if created:
                self.sessions.delete(session.id)
            raise

        self._persist(session.id, user_prompt, response)
        return response, session.id

    async def _call_model(self, messages: List[ChatMessage]) -> str:
        try:
            response = await self.model.generate_content(
                messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            raise ProviderError(f"model generation failed: {e}") from e

        if response.content is None:
            raise ProviderError("model returned empty response")

        logger.debug(f"Analyzer model response: {len(response.content)} chars in {response.response_time_ms}ms")
        return response.content

    def _persist(self, session_id: str, user_prompt: str, response: str) -> None:
        stored = self.sessions.add_messages(session_id, [
            (MessageRole.USER, user_prompt),
            (MessageRole.ASSISTANT, response),
        ])
        if not stored:
            raise NotFoundError("session expired before the exchange could be saved")


def build_messages(session: Session, user_prompt: str) -> List[ChatMessage]:
    """Replay stored history in order, then append the new user turn."""
    messages = [
        ChatMessage(_ROLE_MAP.get(message.role, ChatRole.HUMAN), message.content)
        for message in session.messages
    ]
    messages.append(ChatMessage(ChatRole.HUMAN, user_prompt))
    return messages
