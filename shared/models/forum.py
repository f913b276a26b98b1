from sqlalchemy import Column, String, BigInteger, Boolean, ForeignKey, Text, Integer
from sqlalchemy.orm import relationship
from .base import BaseModel


class Forum(BaseModel):
    __tablename__ = "forums"
    
    name = Column(String, unique=True, nullable=False)
    display_name = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    posts_count = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    
    posts = relationship("ForumPost", back_populates="forum")


class ForumPost(BaseModel):
    __tablename__ = "forum_posts"
    
    forum_id = Column(BigInteger, ForeignKey("forums.id"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    
    # Counters
    views = Column(Integer, default=0)
    replies_count = Column(Integer, default=0)  # top-level replies only
    likes_count = Column(Integer, default=0)
    
    # Moderation
    is_pinned = Column(Boolean, default=False)
    is_locked = Column(Boolean, default=False)
    
    # Relationships
    forum = relationship("Forum", back_populates="posts")
    replies = relationship("ForumPostReply", back_populates="post")


class ForumPostReply(BaseModel):
    __tablename__ = "forum_post_replies"
    
    post_id = Column(BigInteger, ForeignKey("forum_posts.id"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    
    # NULL for a top-level comment; no FK so a deleted parent leaves the row in place
    parent_id = Column(BigInteger, nullable=True, index=True)
    
    content = Column(Text, nullable=False)
    is_answer = Column(Boolean, default=False)
    likes_count = Column(Integer, default=0)
    
    # Relationships
    post = relationship("ForumPost", back_populates="replies")
