from typing import Dict, Any, Optional, List
import logging
from datetime import datetime, timedelta
from core.models import DialogueState

logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory store for dialogue playback sessions"""

    def __init__(self, session_ttl: int = 3600):  # 1 hour TTL
        self.session_ttl = session_ttl
        self.memory_store: Dict[str, Dict[str, Any]] = {}
        logger.info("Using in-memory storage for dialogue sessions")

    def save_state(self, session_id: str, dialogue_state: DialogueState) -> None:
        """Save a snapshot of the dialogue state"""
        self.cleanup_expired()
        self.memory_store[session_id] = {
            'data': dialogue_state.to_dict(),
            'expires_at': datetime.now() + timedelta(seconds=self.session_ttl)
        }
        logger.debug(f"Saved state for session: {session_id}")

    def load_state(self, session_id: str) -> Optional[DialogueState]:
        """Load dialogue state, or None if missing or expired"""
        session_data = self.memory_store.get(session_id)
        if not session_data:
            return None
        if datetime.now() >= session_data['expires_at']:
            del self.memory_store[session_id]
            logger.debug(f"Session {session_id} expired and removed")
            return None
        return DialogueState.model_validate(session_data['data'])

    def delete_state(self, session_id: str) -> bool:
        """Delete dialogue state; True if it existed"""
        existed = self.memory_store.pop(session_id, None) is not None
        logger.debug(f"Deleted state for session: {session_id}")
        return existed

    def list_sessions(self) -> List[str]:
        """List all active sessions"""
        self.cleanup_expired()
        return list(self.memory_store)

    def cleanup_expired(self) -> int:
        """Drop expired sessions; returns how many were removed"""
        current_time = datetime.now()
        expired_sessions = [
            session_id
            for session_id, session_data in self.memory_store.items()
            if current_time >= session_data['expires_at']
        ]
        for session_id in expired_sessions:
            del self.memory_store[session_id]

        if expired_sessions:
            logger.info(f"Cleaned up {len(expired_sessions)} expired sessions")
        return len(expired_sessions)
