"""
Database model for ContentBlock
"""
from sqlalchemy import Column, String, DateTime, JSON, func

from content_api.core.database import Base


class ContentBlock(Base):
    """ContentBlock model - one editable unit of CMS content"""
    __tablename__ = "content_block"

    id = Column(String(64), primary_key=True, index=True)

    # Posted payload, free-form (e.g. {"@subject": "home", "title": "Welcome"})
    data = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    def to_record(self) -> dict:
        """Return the record as served over the API: payload fields plus `_id`."""
        record = dict(self.data or {})
        record["_id"] = self.id
        return record

    def __repr__(self):
        return f"<ContentBlock(id='{self.id}')>"
