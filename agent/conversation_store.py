"""
Conversation history kept in the Django cache (Redis in deployment).

Each session holds an ordered list of {"role", "content"} messages, capped
at AGENT["MAX_HISTORY_MESSAGES"] and expiring AGENT["CONVERSATION_TTL_SECONDS"]
after the last append.
"""
from typing import Dict, List

from django.conf import settings
from django.core.cache import caches

KEY_PREFIX = "agent:conversation:"


class ConversationStore:

    def __init__(self, cache_alias: str = None, ttl: int = None, max_messages: int = None):
        config = settings.AGENT
        self.cache = caches[cache_alias or config["CACHE_ALIAS"]]
        self.ttl = ttl if ttl is not None else config["CONVERSATION_TTL_SECONDS"]
        self.max_messages = max_messages if max_messages is not None else config["MAX_HISTORY_MESSAGES"]

    def _key(self, session_id: str) -> str:
        return f"{KEY_PREFIX}{session_id}"

    def get(self, session_id: str) -> List[Dict[str, str]]:
        return list(self.cache.get(self._key(session_id)) or [])

    def append(self, session_id: str, role: str, content: str) -> List[Dict[str, str]]:
        messages = self.get(session_id)
        messages.append({"role": role, "content": content})
        messages = messages[-self.max_messages:] if self.max_messages > 0 else []
        self.cache.set(self._key(session_id), messages, self.ttl)
        return messages

    def trim(self, session_id: str, max_messages: int = None) -> List[Dict[str, str]]:
        limit = self.max_messages if max_messages is None else max_messages
        messages = self.get(session_id)
        if not messages:
            return []
        messages = messages[-limit:] if limit > 0 else []
        self.cache.set(self._key(session_id), messages, self.ttl)
        return messages

    def expire(self, session_id: str) -> bool:
        return bool(self.cache.delete(self._key(session_id)))
