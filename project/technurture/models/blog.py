# technurture/models/blog.py

from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func

from technurture.utils.database import Base


class BlogPost(Base):
    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)                  # HTML
    excerpt = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)
    author = Column(String(255), nullable=False)
    author_avatar = Column(String(500), nullable=True)
    image = Column(Text, nullable=True)                     # may hold a data URL
    read_time = Column(String(50), nullable=True)
    published = Column(Integer, nullable=False, default=0, index=True)  # 0/1
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
