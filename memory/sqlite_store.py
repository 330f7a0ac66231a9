"""SQLite-based conversation persistence."""

import sqlite3
import json
import logging
from pathlib import Path
from datetime import datetime
from typing import Optional, List

from errors import PersistenceError
from schemas.agent import AgentMessage, StoredConversation, StoredConversationMetadata
from .base_store import ConversationRepository

logger = logging.getLogger(__name__)


class SQLiteConversationStore(ConversationRepository):
    """SQLite-based persistent conversation mirror."""

    def __init__(self, db_path: str = "data/conversations.db"):
        """
        Initialize SQLite conversation store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection with row factory."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self):
        """Initialize database schema."""
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS conversations (
                conversation_id TEXT PRIMARY KEY,
                user_id TEXT,
                status TEXT NOT NULL DEFAULT 'active',
                message_count INTEGER DEFAULT 0,
                start_time TIMESTAMP,
                last_update TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                conversation_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                message_id TEXT NOT NULL,
                role TEXT NOT NULL CHECK(role IN ('user', 'agent', 'system')),
                content TEXT NOT NULL,
                timestamp TIMESTAMP,
                metadata TEXT,
                FOREIGN KEY (conversation_id) REFERENCES conversations(conversation_id)
            )
        """)

        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_messages_conversation ON messages(conversation_id)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_conversations_user ON conversations(user_id)"
        )

        conn.commit()
        conn.close()
        logger.info(f"Database initialized at {self.db_path}")

    def upsert(
        self,
        conversation_id: str,
        messages: List[AgentMessage],
        user_id: Optional[str] = None,
        metadata: Optional[StoredConversationMetadata] = None
    ) -> StoredConversation:
        """
        Replace the stored message list of a conversation.

        Args:
            conversation_id: Conversation ID
            messages: Full message list
            user_id: Optional owner (kept from the existing row when None)
            metadata: Optional metadata (status is taken from it)

        Returns:
            Stored conversation
        """
        now = datetime.now()
        status = metadata.status if metadata else "active"

        try:
            conn = self._get_connection()
            try:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT user_id, start_time FROM conversations WHERE conversation_id = ?",
                    (conversation_id,)
                )
                row = cursor.fetchone()

                if row:
                    start_time = self._parse_time(row["start_time"], now)
                    if user_id is None:
                        user_id = row["user_id"]
                    cursor.execute(
                        """
                        UPDATE conversations
                        SET user_id = ?, status = ?, message_count = ?, last_update = ?
                        WHERE conversation_id = ?
                        """,
                        (user_id, status, len(messages), now.isoformat(), conversation_id)
                    )
                else:
                    start_time = metadata.start_time if metadata else now
                    cursor.execute(
                        """
                        INSERT INTO conversations
                        (conversation_id, user_id, status, message_count, start_time, last_update)
                        VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        (conversation_id, user_id, status, len(messages),
                         start_time.isoformat(), now.isoformat())
                    )

                cursor.execute("DELETE FROM messages WHERE conversation_id = ?", (conversation_id,))
                cursor.executemany(
                    """
                    INSERT INTO messages
                    (conversation_id, position, message_id, role, content, timestamp, metadata)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            conversation_id,
                            position,
                            msg.id,
                            msg.role.value,
                            msg.content,
                            msg.timestamp.isoformat(),
                            json.dumps(msg.metadata) if msg.metadata else None,
                        )
                        for position, msg in enumerate(messages)
                    ]
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Failed to save conversation {conversation_id}: {e}")
            raise PersistenceError(f"Failed to save conversation {conversation_id}: {e}") from e

        return StoredConversation(
            conversation_id=conversation_id,
            user_id=user_id,
            messages=list(messages),
            metadata=StoredConversationMetadata(
                start_time=start_time,
                last_update=now,
                message_count=len(messages),
                status=status,
            ),
        )

    def find_by_conversation_id(self, conversation_id: str) -> Optional[StoredConversation]:
        """
        Get a conversation with all messages.

        Args:
            conversation_id: Conversation ID

        Returns:
            StoredConversation or None if not found
        """
        try:
            conn = self._get_connection()
            try:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT * FROM conversations WHERE conversation_id = ?",
                    (conversation_id,)
                )
                conv_row = cursor.fetchone()

                if not conv_row:
                    return None

                cursor.execute(
                    """
                    SELECT message_id, role, content, timestamp, metadata
                    FROM messages
                    WHERE conversation_id = ?
                    ORDER BY position
                    """,
                    (conversation_id,)
                )
                message_rows = cursor.fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Failed to load conversation {conversation_id}: {e}")
            raise PersistenceError(f"Failed to load conversation {conversation_id}: {e}") from e

        now = datetime.now()
        messages = [
            AgentMessage(
                id=row["message_id"],
                role=row["role"],
                content=row["content"],
                timestamp=self._parse_time(row["timestamp"], now),
                metadata=json.loads(row["metadata"]) if row["metadata"] else None,
            )
            for row in message_rows
        ]

        return StoredConversation(
            conversation_id=conv_row["conversation_id"],
            user_id=conv_row["user_id"],
            messages=messages,
            metadata=StoredConversationMetadata(
                start_time=self._parse_time(conv_row["start_time"], now),
                last_update=self._parse_time(conv_row["last_update"], now),
                message_count=conv_row["message_count"] or 0,
                status=conv_row["status"],
            ),
        )

    def list_conversations(
        self,
        user_id: Optional[str] = None,
        limit: int = 50
    ) -> List[StoredConversation]:
        """
        List conversations, newest first, optionally filtered by user.

        Args:
            user_id: Optional user filter
            limit: Maximum number of conversations

        Returns:
            StoredConversation objects without messages
        """
        try:
            conn = self._get_connection()
            try:
                cursor = conn.cursor()
                if user_id:
                    cursor.execute(
                        """
                        SELECT * FROM conversations
                        WHERE user_id = ?
                        ORDER BY last_update DESC
                        LIMIT ?
                        """,
                        (user_id, limit)
                    )
                else:
                    cursor.execute(
                        """
                        SELECT * FROM conversations
                        ORDER BY last_update DESC
                        LIMIT ?
                        """,
                        (limit,)
                    )
                rows = cursor.fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Failed to list conversations: {e}")
            raise PersistenceError(f"Failed to list conversations: {e}") from e

        now = datetime.now()
        return [
            StoredConversation(
                conversation_id=row["conversation_id"],
                user_id=row["user_id"],
                messages=[],  # Don't load messages for listing
                metadata=StoredConversationMetadata(
                    start_time=self._parse_time(row["start_time"], now),
                    last_update=self._parse_time(row["last_update"], now),
                    message_count=row["message_count"] or 0,
                    status=row["status"],
                ),
            )
            for row in rows
        ]

    def _parse_time(self, value: Optional[str], default: datetime) -> datetime:
        return datetime.fromisoformat(value) if value else default
