import copy
import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional, Protocol

import psycopg2
from psycopg2.extras import Json

from examprep.clients.db_client import get_db_connection
from examprep.models.chat import ChatMessage, ChatSession
from examprep.models.paper import ExtractionStatus, Paper

logger = logging.getLogger(__name__)

PAPER_COLUMNS = (
    "id, paper_file_url, marking_scheme_file_url, title, year, paper_number, subject_id, "
    "paper_extracted_text, marking_scheme_extracted_text, text_extraction_status, "
    "text_extracted_at, extraction_error"
)


class PaperStore(Protocol):
    def get_paper(self, paper_id: str) -> Optional[Paper]: ...

    def mark_processing(self, paper_id: str) -> None: ...

    def save_extraction_result(
        self,
        paper_id: str,
        paper_text: Optional[str],
        marking_scheme_text: Optional[str],
        status: ExtractionStatus,
        extracted_at: Optional[datetime],
        error: Optional[str],
    ) -> None: ...

    def get_session(self, session_id: str) -> Optional[ChatSession]: ...

    def append_messages(self, session_id: str, messages: List[ChatMessage]) -> bool: ...


class PaperRepository:
    """Reads and writes exam_papers and chat_sessions rows in PostgreSQL"""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url

    def _connect(self):
        return get_db_connection(self.database_url)

    def get_paper(self, paper_id: str) -> Optional[Paper]:
        conn = self._connect()
        try:
            cur = conn.cursor()
            try:
                cur.execute(f"SELECT {PAPER_COLUMNS} FROM exam_papers WHERE id = %s", (paper_id,))
            except psycopg2.DataError as e:
                # Malformed id, e.g. not a uuid: treat as no such paper
                conn.rollback()
                logger.warning("Invalid paper id %r: %s", paper_id, e)
                return None
            row = cur.fetchone()
            return Paper(**{**row, "id": str(row["id"])}) if row else None
        finally:
            conn.close()

    def mark_processing(self, paper_id: str) -> None:
        conn = self._connect()
        try:
            cur = conn.cursor()
            cur.execute(
                "UPDATE exam_papers SET text_extraction_status = %s, updated_at = now() WHERE id = %s",
                (ExtractionStatus.PROCESSING.value, paper_id),
            )
            conn.commit()
        finally:
            conn.close()

    def save_extraction_result(
        self,
        paper_id: str,
        paper_text: Optional[str],
        marking_scheme_text: Optional[str],
        status: ExtractionStatus,
        extracted_at: Optional[datetime],
        error: Optional[str],
    ) -> None:
        conn = self._connect()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                UPDATE exam_papers
                SET paper_extracted_text = %s,
                    marking_scheme_extracted_text = %s,
                    text_extraction_status = %s,
                    text_extracted_at = %s,
                    extraction_error = %s,
                    updated_at = now()
                WHERE id = %s
                """,
                (paper_text, marking_scheme_text, status.value, extracted_at, error, paper_id),
            )
            conn.commit()
            logger.info("Saved extraction result for paper %s (%s)", paper_id, status.value)
        finally:
            conn.close()

    def get_session(self, session_id: str) -> Optional[ChatSession]:
        conn = self._connect()
        try:
            cur = conn.cursor()
            try:
                cur.execute("SELECT id, paper_id, messages FROM chat_sessions WHERE id = %s", (session_id,))
            except psycopg2.DataError as e:
                conn.rollback()
                logger.warning("Invalid chat session id %r: %s", session_id, e)
                return None
            row = cur.fetchone()
            if not row:
                return None
            return ChatSession(
                id=str(row["id"]),
                paper_id=str(row["paper_id"]) if row["paper_id"] else None,
                messages=row["messages"] or [],
            )
        finally:
            conn.close()

    def append_messages(self, session_id: str, messages: List[ChatMessage]) -> bool:
        """Append to a session's message list; False when the session does not exist"""
        conn = self._connect()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                UPDATE chat_sessions
                SET messages = COALESCE(messages, '[]'::jsonb) || %s::jsonb,
                    updated_at = now()
                WHERE id = %s
                RETURNING id
                """,
                (Json([m.model_dump(mode="json") for m in messages]), session_id),
            )
            updated = cur.fetchone() is not None
            conn.commit()
            return updated
        finally:
            conn.close()


class InMemoryPaperRepository:
    """Dict-backed store for tests and local runs without a database"""

    def __init__(self, papers: Optional[List[Paper]] = None, sessions: Optional[List[ChatSession]] = None):
        self._lock = threading.Lock()
        self.papers: Dict[str, Paper] = {p.id: p for p in papers or []}
        self.sessions: Dict[str, ChatSession] = {s.id: s for s in sessions or []}
        self.status_history: Dict[str, List[ExtractionStatus]] = {}

    def add_paper(self, paper: Paper) -> None:
        with self._lock:
            self.papers[paper.id] = paper

    def add_session(self, session: ChatSession) -> None:
        with self._lock:
            self.sessions[session.id] = session

    def get_paper(self, paper_id: str) -> Optional[Paper]:
        with self._lock:
            paper = self.papers.get(paper_id)
            return copy.deepcopy(paper) if paper else None

    def mark_processing(self, paper_id: str) -> None:
        self._update(paper_id, text_extraction_status=ExtractionStatus.PROCESSING)

    def save_extraction_result(
        self,
        paper_id: str,
        paper_text: Optional[str],
        marking_scheme_text: Optional[str],
        status: ExtractionStatus,
        extracted_at: Optional[datetime],
        error: Optional[str],
    ) -> None:
        self._update(
            paper_id,
            paper_extracted_text=paper_text,
            marking_scheme_extracted_text=marking_scheme_text,
            text_extraction_status=status,
            text_extracted_at=extracted_at,
            extraction_error=error,
        )

    def _update(self, paper_id: str, **fields) -> None:
        with self._lock:
            paper = self.papers.get(paper_id)
            if paper is None:
                return
            self.papers[paper_id] = paper.model_copy(update=fields)
            if "text_extraction_status" in fields:
                self.status_history.setdefault(paper_id, []).append(fields["text_extraction_status"])

    def get_session(self, session_id: str) -> Optional[ChatSession]:
        with self._lock:
            session = self.sessions.get(session_id)
            return copy.deepcopy(session) if session else None

    def append_messages(self, session_id: str, messages: List[ChatMessage]) -> bool:
        with self._lock:
            session = self.sessions.get(session_id)
            if session is None:
                return False
            session.messages.extend(messages)
            return True
