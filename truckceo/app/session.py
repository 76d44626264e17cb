#!/usr/bin/env python3
"""
Session management module for the TruckCEO backend.

Stores assistant conversation history per session in Redis, falling back to
process memory when Redis is unreachable.
"""

import json
import redis
from typing import Dict, List, Any, Optional
from datetime import datetime
from .config import Config
from ..utils.logger import get_logger

logger = get_logger()


class SessionManager:
    """Manages assistant conversation history per session."""

    def __init__(self, use_redis: bool = True, redis_client=None):
        """Initialize the session manager with Redis connection or fallback to in-memory."""
        self.use_redis = use_redis
        self.memory_sessions: Dict[str, Dict[str, Any]] = {}  # Fallback in-memory storage
        self.redis_client = None

        if not use_redis:
            return
        try:
            self.redis_client = redis_client or redis.Redis(
                host=Config.REDIS_HOST,
                port=Config.REDIS_PORT,
                db=Config.REDIS_DB,
                decode_responses=True
            )
            # Test Redis connection
            self.redis_client.ping()
            logger.info("Using Redis for session storage")
        except redis.RedisError as e:
            logger.warning(f"Redis not available ({e}), using in-memory session storage")
            self.use_redis = False
            self.redis_client = None

    def _get_session_key(self, session_id: str) -> str:
        """
        Generate Redis key for a session.

        Args:
            session_id: Unique session identifier

        Returns:
            Redis key for the session
        """
        return f"session:{session_id}"

    def _save(self, session_id: str, session_data: Dict[str, Any]) -> None:
        if self.use_redis:
            self.redis_client.set(self._get_session_key(session_id), json.dumps(session_data))
        else:
            self.memory_sessions[session_id] = session_data

    def create_session(self, session_id: str) -> bool:
        """
        Create a new session.

        Args:
            session_id: Unique session identifier

        Returns:
            True if session was created, False if it already exists
        """
        if self.get_session(session_id) is not None:
            return False
        now = datetime.now().isoformat()
        self._save(session_id, {"messages": [], "created_at": now, "last_updated": now})
        return True

    def get_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve session data.

        Args:
            session_id: Unique session identifier

        Returns:
            Session data or None if not found
        """
        if self.use_redis:
            session_data = self.redis_client.get(self._get_session_key(session_id))
            if session_data:
                return json.loads(session_data)
            return None
        return self.memory_sessions.get(session_id)

    def add_message(self, session_id: str, role: str, text: str) -> bool:
        """
        Add a message to the session conversation history.

        Args:
            session_id: Unique session identifier
            role: Role of the message sender (user or agent)
            text: Message text

        Returns:
            True if successful, False otherwise
        """
        session_data = self.get_session(session_id)
        if not session_data:
            # Auto-create session if it doesn't exist
            self.create_session(session_id)
            session_data = self.get_session(session_id)
            if not session_data:
                return False

        session_data["messages"].append({
            "role": role,
            "text": text,
            "timestamp": datetime.now().isoformat()
        })
        # Keep only the most recent turns
        max_messages = Config.MAX_CONVERSATION_TURNS * 2
        session_data["messages"] = session_data["messages"][-max_messages:]
        session_data["last_updated"] = datetime.now().isoformat()
        self._save(session_id, session_data)
        return True

    def get_history(self, session_id: str) -> List[Dict[str, Any]]:
        session_data = self.get_session(session_id)
        return list(session_data["messages"]) if session_data else []

    def delete_session(self, session_id: str) -> None:
        if self.use_redis:
            self.redis_client.delete(self._get_session_key(session_id))
        else:
            self.memory_sessions.pop(session_id, None)
