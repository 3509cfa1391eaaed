"""
In-memory storage collaborator for interview records.
"""
import logging
import threading
from typing import Dict, List

from mockinterview.models.schemas import InterviewRecord
from mockinterview.utils.errors import PersistenceError, SessionNotFoundError

logger = logging.getLogger(__name__)


class InMemoryStorage:
    """
    Keeps interview records keyed by interview id.

    Records are copied on the way in and out so callers never share mutable
    state with the store. `save_interview` is an upsert of the whole record,
    so repeating a failed save is always safe.
    """

    def __init__(self):
        self._records: Dict[str, InterviewRecord] = {}
        self._lock = threading.Lock()

    def create_interview(self, record: InterviewRecord) -> InterviewRecord:
        with self._lock:
            if record.interview_id in self._records:
                raise PersistenceError(f"Interview {record.interview_id} already exists",
                                       interview_id=record.interview_id)
            self._records[record.interview_id] = record.model_copy(deep=True)
        logger.info(f"Created interview {record.interview_id} for user {record.user_id}")
        return record

    def save_interview(self, record: InterviewRecord) -> InterviewRecord:
        with self._lock:
            self._records[record.interview_id] = record.model_copy(deep=True)
        return record

    def load_interview(self, interview_id: str) -> InterviewRecord:
        with self._lock:
            record = self._records.get(interview_id)
        if record is None:
            raise SessionNotFoundError(f"Interview {interview_id} not found", interview_id=interview_id)
        return record.model_copy(deep=True)

    def load_interviews(self, user_id: str) -> List[InterviewRecord]:
        with self._lock:
            records = [r for r in self._records.values() if r.user_id == user_id]
        return [r.model_copy(deep=True) for r in sorted(records, key=lambda r: r.created_at)]

    def delete_interview(self, interview_id: str) -> None:
        with self._lock:
            if self._records.pop(interview_id, None) is None:
                raise SessionNotFoundError(f"Interview {interview_id} not found", interview_id=interview_id)
        logger.info(f"Deleted interview {interview_id}")
