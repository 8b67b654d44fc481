"""链接相关模型"""
from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from ..database import Base

DEFAULT_COLOR = "#3b82f6"


class Category(Base):
    """分类表"""
    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_categories_user_name"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String(20), nullable=False, default=DEFAULT_COLOR)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # 关系（删除分类时链接只解除关联，不级联删除）
    user = relationship("User", back_populates="categories")
    links = relationship("Link", back_populates="category", passive_deletes=True)


class Tag(Base):
    """标签表"""
    __tablename__ = "tags"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_tags_user_name"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    color = Column(String(20), nullable=False, default=DEFAULT_COLOR)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # 关系
    user = relationship("User", back_populates="tags")
    links = relationship("LinkTag", back_populates="tag", cascade="all, delete-orphan", passive_deletes=True)


class LinkTag(Base):
    """链接-标签关联表"""
    __tablename__ = "link_tags"

    link_id = Column(String(36), ForeignKey("links.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)

    # 关系
    link = relationship("Link", back_populates="tags")
    tag = relationship("Tag", back_populates="links")


class Link(Base):
    """链接表"""
    __tablename__ = "links"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    title = Column(String(255), nullable=False)
    url = Column(String(2000), nullable=False)
    description = Column(Text, nullable=True)
    favicon = Column(String(2100), nullable=True)
    is_favorite = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # 关系
    user = relationship("User", back_populates="links")
    category = relationship("Category", back_populates="links")
    tags = relationship("LinkTag", back_populates="link", cascade="all, delete-orphan", passive_deletes=True)
