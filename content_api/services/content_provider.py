"""
Content provider - persistence collaborator behind the content routes
"""
import logging
import re
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from content_api.core.database import get_db
from content_api.models.content_block import ContentBlock
from content_api.utils.query_utils import RegexCondition

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Content provider operation exception"""
    pass


class ContentProvider(ABC):
    """
    Interface the content routes delegate to.

    Faults are reported by raising ProviderError. "Nothing there" is not a
    fault: it is reported as None or a zero count.
    """

    @abstractmethod
    async def find(self, query: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
        """Return all records matching a cleaned query."""

    @abstractmethod
    async def find_one(self, item_id: str) -> Optional[Dict[str, Any]]:
        """Return the record with the given id, or None."""

    @abstractmethod
    async def save(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Store a new record and return it with its `_id`."""

    @abstractmethod
    async def update(self, item_id: str, data: Dict[str, Any]) -> Tuple[Dict[str, Any], int]:
        """Update a record, returning the resulting document and the number updated."""

    @abstractmethod
    async def delete(self, item_id: str) -> Tuple[str, int]:
        """Delete a record, returning the id and the number deleted."""


class SqlContentProvider(ContentProvider):
    """
    Content provider storing each content block as a JSON row.

    Queries are evaluated in Python against the stored records: plain values
    must be equal, RegexCondition values are searched for in the field's
    string form. Session work is blocking and runs in the threadpool.
    """

    def __init__(self, db: Session):
        self.db = db

    async def find(self, query: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
        return await run_in_threadpool(self._find, query)

    async def find_one(self, item_id: str) -> Optional[Dict[str, Any]]:
        return await run_in_threadpool(self._find_one, item_id)

    async def save(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await run_in_threadpool(self._save, data)

    async def update(self, item_id: str, data: Dict[str, Any]) -> Tuple[Dict[str, Any], int]:
        return await run_in_threadpool(self._update, item_id, data)

    async def delete(self, item_id: str) -> Tuple[str, int]:
        return await run_in_threadpool(self._delete, item_id)

    def _find(self, query: Dict[str, Any]) -> List[Dict[str, Any]]:
        if not isinstance(query, dict):
            raise ProviderError(f"Query must be a JSON object, got {type(query).__name__}")

        conditions = _compile_conditions(query)
        try:
            blocks = self.db.query(ContentBlock).order_by(ContentBlock.created_at, ContentBlock.id).all()
        except SQLAlchemyError as e:
            raise ProviderError(f"Failed to query content blocks: {str(e)}")

        records = [block.to_record() for block in blocks]
        return [record for record in records if _matches(record, conditions)]

    def _find_one(self, item_id: str) -> Optional[Dict[str, Any]]:
        try:
            block = self.db.get(ContentBlock, item_id)
        except SQLAlchemyError as e:
            raise ProviderError(f"Failed to get content block: {str(e)}")
        return block.to_record() if block else None

    def _save(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise ProviderError("Content block must be a JSON object")

        payload = dict(data)
        item_id = payload.pop("_id", None)
        item_id = uuid.uuid4().hex if item_id is None else str(item_id)

        try:
            if self.db.get(ContentBlock, item_id) is not None:
                raise ProviderError(f"Content block {item_id} already exists")

            block = ContentBlock(id=item_id, data=payload)
            self.db.add(block)
            self.db.commit()
            self.db.refresh(block)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ProviderError(f"Failed to save content block: {str(e)}")

        logger.info(f"Saved content block {item_id}")
        return block.to_record()

    def _update(self, item_id: str, data: Dict[str, Any]) -> Tuple[Dict[str, Any], int]:
        if not isinstance(data, dict):
            raise ProviderError("Content block must be a JSON object")

        try:
            block = self.db.get(ContentBlock, item_id)
            if block is None:
                return data, 0

            # Merge only the posted fields; the id itself never changes
            merged = dict(block.data or {})
            merged.update({key: value for key, value in data.items() if key != "_id"})
            block.data = merged

            self.db.commit()
            self.db.refresh(block)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ProviderError(f"Failed to update content block: {str(e)}")

        logger.info(f"Updated content block {item_id}")
        return block.to_record(), 1

    def _delete(self, item_id: str) -> Tuple[str, int]:
        try:
            block = self.db.get(ContentBlock, item_id)
            if block is None:
                return item_id, 0

            self.db.delete(block)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ProviderError(f"Failed to delete content block: {str(e)}")

        logger.info(f"Deleted content block {item_id}")
        return item_id, 1


def _compile_conditions(query: Dict[str, Any]) -> Dict[str, Any]:
    """Compile RegexCondition values, leaving plain values as they are."""
    conditions = {}
    for field, expected in query.items():
        if isinstance(expected, RegexCondition):
            flags = re.IGNORECASE if expected.case_insensitive else 0
            try:
                expected = re.compile(expected.pattern, flags)
            except re.error as e:
                raise ProviderError(f"Invalid regular expression '{expected.pattern}': {str(e)}")
        conditions[field] = expected
    return conditions


def _matches(record: Dict[str, Any], conditions: Dict[str, Any]) -> bool:
    for field, expected in conditions.items():
        if field not in record:
            return False
        value = record[field]
        if isinstance(expected, re.Pattern):
            if not expected.search(str(value)):
                return False
        elif value != expected:
            return False
    return True


def get_content_provider(db: Session = Depends(get_db)) -> ContentProvider:
    """Dependency returning the content provider for the current request"""
    return SqlContentProvider(db)
