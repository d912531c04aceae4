import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Column,
    Text,
    DateTime,
    Boolean,
    ForeignKey,
    Integer,
    Numeric,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, relationship


Base = declarative_base()

# JSONB on Postgres, plain JSON on SQLite (local dev / tests)
JsonType = JSON().with_variant(JSONB(), "postgresql")


def _uuid() -> str:
    return str(uuid.uuid4())


class UserRow(Base):
    __tablename__ = "users"

    id = Column(Text, primary_key=True, default=_uuid)
    auth_subject = Column(Text, unique=True, nullable=True)
    zotero_user_id = Column(Text, unique=True, nullable=True)
    email = Column(Text, nullable=True)
    zotero_username = Column(Text, nullable=True)
    display_name = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    last_login = Column(DateTime, default=datetime.utcnow)

    papers = relationship("PaperRow", back_populates="user", cascade="all, delete-orphan")


class PaperRow(Base):
    __tablename__ = "papers"
    __table_args__ = (UniqueConstraint("user_id", "zotero_key", name="papers_user_zotero_key_uq"),)

    id = Column(Text, primary_key=True, default=_uuid)
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    zotero_key = Column(Text, nullable=False, index=True)

    title = Column(Text)
    authors = Column(JsonType, default=list)
    abstract = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("UserRow", back_populates="papers")


class PaperAnalysisRow(Base):
    """一条卡片分析结果；同一 (user, paper, type) 重复保存时递增 version"""
    __tablename__ = "paper_analysis"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "paper_id", "analysis_type", "version",
            name="paper_analysis_version_uq",
        ),
    )

    id = Column(Text, primary_key=True, default=_uuid)
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    paper_id = Column(Text, ForeignKey("papers.id", ondelete="CASCADE"), nullable=False, index=True)

    analysis_type = Column(Text, nullable=False, index=True)  # card id
    analysis_title = Column(Text, nullable=False)

    content = Column(Text, nullable=False)
    prompt_used = Column(Text)
    confidence_score = Column(Numeric(3, 2))  # 0.00 - 1.00

    processing_time_ms = Column(Integer)
    chunks_used = Column(Integer)
    model_used = Column(Text)

    version = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True)

    generated_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
