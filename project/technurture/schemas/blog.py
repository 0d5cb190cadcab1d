# technurture/schemas/blog.py

from datetime import datetime
from typing import Optional

from technurture.schemas.base import CamelModel, Flag, NonEmpty, PartialModel


class BlogPostCreate(CamelModel):
    title: NonEmpty
    content: NonEmpty          # rich HTML
    excerpt: Optional[str] = None
    category: Optional[str] = None
    author: NonEmpty
    author_avatar: Optional[str] = None
    image: Optional[str] = None
    read_time: Optional[str] = None
    published: Flag = 0


class BlogPostUpdate(PartialModel):
    not_nullable = frozenset({"title", "content", "author", "published"})

    title: Optional[NonEmpty] = None
    content: Optional[NonEmpty] = None
    excerpt: Optional[str] = None
    category: Optional[str] = None
    author: Optional[NonEmpty] = None
    author_avatar: Optional[str] = None
    image: Optional[str] = None
    read_time: Optional[str] = None
    published: Optional[Flag] = None


class BlogPost(BlogPostCreate):
    id: str
    created_at: datetime
    updated_at: datetime
