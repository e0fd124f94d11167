"""Auto-reply generation for inbound conversation messages.

The completion backend is an optional capability: with no API key
configured there is no completer and every reply is the fallback
acknowledgement. Completer failures are logged and replaced by the same
fallback; they never reach the caller.
"""

from typing import Iterable, Optional, Protocol

from openai import OpenAI

from postboard.config import (
    AUTO_REPLY_MODEL,
    AUTO_REPLY_TIMEOUT_SECONDS,
    OPENAI_API_KEY,
)
from postboard.db.models import ConversationMessage, MessageDirection
from postboard.logging import get_logger

logger = get_logger(__name__)

FALLBACK_REPLY = "Thanks for your message! We'll get back to you shortly."

SYSTEM_PROMPT = (
    "You are a friendly social media assistant replying to customer messages "
    "on behalf of a business page. Keep replies short, polite and helpful."
)


class Completer(Protocol):
    """Anything that turns a prompt into a reply string."""

    def complete(self, prompt: str) -> str:
        ...


class OpenAICompleter:
    """Completer backed by the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: str,
        model: str = AUTO_REPLY_MODEL,
        timeout: float = AUTO_REPLY_TIMEOUT_SECONDS,
        max_tokens: int = 150,
    ):
        # max_retries=0 keeps the total wait bounded by ``timeout``
        self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self.model = model
        self.max_tokens = max_tokens

    def complete(self, prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.max_tokens,
        )
        return response.choices[0].message.content or ""


def get_completer() -> Optional[Completer]:
    """Build the configured completer, or None when auto-reply is disabled."""
    if not OPENAI_API_KEY:
        return None
    return OpenAICompleter(api_key=OPENAI_API_KEY)


def build_prompt(history: Iterable[ConversationMessage], inbound_text: str) -> str:
    lines = []
    for message in history:
        speaker = "Customer" if message.direction == MessageDirection.received else "Business"
        lines.append(f"{speaker}: {message.text}")
    lines.append(f"Customer: {inbound_text}")
    return (
        "Conversation so far:\n"
        + "\n".join(lines)
        + "\n\nWrite the business's next reply."
    )


class AutoReplyService:
    """Produces the reply appended after each inbound message."""

    def __init__(self, completer: Optional[Completer] = None):
        self._completer = completer

    def generate(self, history: Iterable[ConversationMessage], inbound_text: str) -> str:
        """Return a reply for ``inbound_text``; never raises."""
        if self._completer is None:
            return FALLBACK_REPLY

        prompt = build_prompt(history, inbound_text)
        try:
            reply = (self._completer.complete(prompt) or "").strip()
        except Exception as e:
            logger.warning("auto_reply_failed", error=str(e), error_type=type(e).__name__)
            return FALLBACK_REPLY

        if not reply:
            logger.info("auto_reply_empty")
            return FALLBACK_REPLY
        return reply
