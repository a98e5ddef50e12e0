from __future__ import annotations

from datetime import timezone
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.orm import sessionmaker

from flightwise.memory.store import ConversationStore, Turn
from flightwise.models import ChatSession, ChatTurn


class SqlConversationStore(ConversationStore):
    """
    Conversation history in the chat_sessions/chat_turns tables.
    Survives restarts; swap in with CONVERSATION_STORE=sql.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def append(self, session_id: str, role: str, text: str) -> Turn:
        turn = Turn(role=role, text=text)
        db = self._session_factory()
        try:
            if db.get(ChatSession, session_id) is None:
                db.add(ChatSession(id=session_id))
                db.flush()
            db.add(ChatTurn(
                session_id=session_id,
                role=role,
                text=text,
                created_at=turn.timestamp,
            ))
            db.commit()
        finally:
            db.close()
        return turn

    def turns(self, session_id: str) -> List[Turn]:
        db = self._session_factory()
        try:
            rows = db.scalars(
                select(ChatTurn)
                .where(ChatTurn.session_id == session_id)
                .order_by(ChatTurn.id)
            ).all()
            out = []
            for m in rows:
                ts = m.created_at
                # sqlite drops tzinfo on the way back
                if ts is not None and ts.tzinfo is None:
                    ts = ts.replace(tzinfo=timezone.utc)
                out.append(Turn(role=m.role, text=m.text, timestamp=ts))
            return out
        finally:
            db.close()

    def clear(self, session_id: str) -> None:
        db = self._session_factory()
        try:
            db.execute(delete(ChatTurn).where(ChatTurn.session_id == session_id))
            db.execute(delete(ChatSession).where(ChatSession.id == session_id))
            db.commit()
        finally:
            db.close()
