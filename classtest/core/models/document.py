from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String

from classtest.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(Base):
    """
    One document of the document store, kept as a JSON row.

    - path: full document path, e.g. artifacts/default/tenants/<tid>/public/data/students/<id>
    - collection: the path without its last segment; live subscriptions and listings key on it
    """

    __tablename__ = "documents"

    path = Column(String(512), primary_key=True)
    collection = Column(String(512), nullable=False, index=True)
    doc_id = Column(String(255), nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
