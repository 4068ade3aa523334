"""
Support Chat Session

Purpose:
- Hold one visitor's help-desk conversation as an immutable handle
- Detect messages that should go to a human
- Build the support request payload for an escalation

Important:
- Every operation returns a NEW ChatSession; nothing is stored globally
- The chat-completion provider and the support_requests table live outside
  this module; callers pass handles and payloads to them
"""

from __future__ import annotations

import secrets
import string
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from registration_reports.utils.logger import get_logger

logger = get_logger(__name__)

MAX_HISTORY_LENGTH = 10
ROLES = ("user", "assistant")

ESCALATION_TRIGGERS = (
    "payment",
    "refund",
    "cancel",
    "problem",
    "issue",
    "error",
    "bug",
    "not working",
    "broken",
    "complaint",
    "speak to someone",
    "talk to human",
    "manager",
    "urgent",
    "emergency",
    "special request",
    "accommodation change",
    "registration error",
)

ESCALATION_SUBJECT = "Chat Escalation - Assistance Needed"

_ID_ALPHABET = string.ascii_lowercase + string.digits


# ------------------------------------------------------------
# Models
# ------------------------------------------------------------

@dataclass(frozen=True)
class ChatMessage:
    id: int
    role: str
    content: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class UserInfo:
    name: str
    email: str


@dataclass(frozen=True)
class ChatSession:
    id: str
    created_at: datetime
    messages: Tuple[ChatMessage, ...] = ()
    escalated: bool = False
    user_info: Optional[UserInfo] = None
    support_request_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "messages": [m.to_dict() for m in self.messages],
            "createdAt": self.created_at.isoformat(),
            "escalated": self.escalated,
            "userInfo": (
                {"name": self.user_info.name, "email": self.user_info.email}
                if self.user_info else None
            ),
            "supportRequestId": self.support_request_id,
        }


# ------------------------------------------------------------
# Session lifecycle
# ------------------------------------------------------------

def _now() -> datetime:
    return datetime.now(timezone.utc)


def generate_session_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"chat_{int(time.time() * 1000)}_{suffix}"


def create_session() -> ChatSession:
    return ChatSession(id=generate_session_id(), created_at=_now())


def clear_session(session: Optional[ChatSession] = None) -> ChatSession:
    """Drop the conversation and start over with a fresh id."""
    if session is not None:
        logger.debug("Clearing chat session %s", session.id)
    return create_session()


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def load_session(payload: Optional[Mapping[str, Any]]) -> ChatSession:
    """
    Rebuild a session from its stored dict form.

    A payload without an id, a message list and a creation time is not a
    session; a new one is returned instead.
    """
    if not isinstance(payload, Mapping) or not payload.get("id") \
            or not isinstance(payload.get("messages"), list) or not payload.get("createdAt"):
        logger.warning("Invalid chat session structure, creating new session")
        return create_session()

    try:
        messages = tuple(
            ChatMessage(
                id=int(m["id"]),
                role=str(m["role"]),
                content=str(m["content"]),
                timestamp=_parse_timestamp(m["timestamp"]),
            )
            for m in payload["messages"]
        )
        created_at = _parse_timestamp(payload["createdAt"])
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Unreadable chat session %s (%s), creating new session", payload.get("id"), e)
        return create_session()

    info = payload.get("userInfo")
    user_info = None
    if isinstance(info, Mapping) and info.get("name") and info.get("email"):
        user_info = UserInfo(name=str(info["name"]), email=str(info["email"]))

    return ChatSession(
        id=str(payload["id"]),
        created_at=created_at,
        messages=messages,
        escalated=bool(payload.get("escalated", False)),
        user_info=user_info,
        support_request_id=payload.get("supportRequestId"),
    )


def add_message(session: ChatSession, role: str, content: str) -> ChatSession:
    if role not in ROLES:
        raise ValueError(f"Unknown chat role: {role!r}")

    now = _now()
    message_id = int(now.timestamp() * 1000)
    # Message ids stay unique within a session even inside one millisecond
    if session.messages and message_id <= session.messages[-1].id:
        message_id = session.messages[-1].id + 1

    message = ChatMessage(id=message_id, role=role, content=content, timestamp=now)
    return replace(session, messages=session.messages + (message,))


def with_user_info(session: ChatSession, name: str, email: str) -> ChatSession:
    return replace(session, user_info=UserInfo(name=name, email=email))


def mark_escalated(session: ChatSession, support_request_id: str) -> ChatSession:
    return replace(session, escalated=True, support_request_id=support_request_id)


# ------------------------------------------------------------
# Reading a session
# ------------------------------------------------------------

def conversation_history(session: ChatSession, max_messages: int = MAX_HISTORY_LENGTH) -> List[Dict[str, str]]:
    """Most recent messages as role/content pairs, oldest first."""
    if max_messages <= 0:
        return []
    return [{"role": m.role, "content": m.content} for m in session.messages[-max_messages:]]


def export_transcript(session: ChatSession) -> str:
    return "\n\n".join(
        f"[{m.timestamp:%H:%M:%S}] {m.role.upper()}: {m.content}" for m in session.messages
    )


# ------------------------------------------------------------
# Escalation
# ------------------------------------------------------------

def should_escalate(message: str) -> bool:
    lowered = (message or "").lower()
    return any(trigger in lowered for trigger in ESCALATION_TRIGGERS)


def build_escalation_request(session: ChatSession, name: Optional[str], email: Optional[str]) -> Dict[str, str]:
    """
    Row for the support_requests table.

    :raises ValueError: name or email missing, or nothing to escalate
    """
    if not name or not email:
        raise ValueError("User information is required for support escalation")
    if not session.messages:
        raise ValueError("No conversation to escalate")

    history = "\n\n".join(f"[{m.role.upper()}]: {m.content}" for m in session.messages)

    return {
        "name": name,
        "email": email,
        "subject": ESCALATION_SUBJECT,
        "message": (
            "This request was escalated from the chatbot.\n\n"
            f"User: {name} ({email})\n\n"
            f"--- CHAT HISTORY ---\n\n{history}"
        ),
        "priority": "medium",
        "status": "open",
        "source": "chatbot",
    }
