"""API Key 模型"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from ..database import Base


class ApiKey(Base):
    """API Key 表（只保存 SHA-256 哈希，明文只在创建时返回一次）"""
    __tablename__ = "api_keys"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=True)
    prefix = Column(String(32), nullable=True)
    start = Column(String(16), nullable=False)  # 明文前几位，用于展示
    key_hash = Column(String(64), unique=True, nullable=False, index=True)
    enabled = Column(Boolean, default=True, nullable=False)
    remaining = Column(Integer, nullable=True)  # 剩余可用次数，为空表示不限
    expires_at = Column(DateTime, nullable=True)
    permissions = Column(JSON, nullable=True)
    meta = Column("metadata", JSON, nullable=True)
    last_used_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # 关系
    user = relationship("User", back_populates="api_keys")
