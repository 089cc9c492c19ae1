from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text, UniqueConstraint

from ..db import Base


class Document(Base):
    __tablename__ = "document"
    id = Column(Integer, primary_key=True)
    collection = Column(String(40), nullable=False, index=True)  # orders | inventory | settings
    doc_id = Column(String(80), nullable=False)
    body = Column(Text, nullable=False)  # JSON
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    __table_args__ = (UniqueConstraint("collection", "doc_id", name="uq_collection_doc"),)
