# technurture/routes/blog.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status

from technurture.middleware.auth import require_admin
from technurture.schemas.blog import BlogPostCreate, BlogPostUpdate

router = APIRouter()


def parse_flag(value: Optional[str]) -> Optional[bool]:
    """'true' / 'false' narrow the listing; anything else means no filter."""
    if value == "true":
        return True
    if value == "false":
        return False
    return None


# ────────────── READ (public) ──────────────
@router.get("", summary="List blog posts, newest first")
async def read_blog_posts(request: Request, published: Optional[str] = None):
    posts = await request.state.storage.get_blog_posts(parse_flag(published))
    return [p.to_json() for p in posts]


@router.get(
    "/{id}",
    summary="Get one blog post",
    responses={404: {"description": "Blog post not found"}},
)
async def read_blog_post(id: str, request: Request):
    post = await request.state.storage.get_blog_post(id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog post not found")
    return post.to_json()


# ────────────── WRITE (admin) ──────────────
@router.post("", summary="Create a blog post (admin)", dependencies=[Depends(require_admin)])
async def create_blog_post(request: Request, post: BlogPostCreate):
    created = await request.state.storage.create_blog_post(post)
    await request.app.state.log.log_info("blog", "Blog post created", {"id": created.id, "title": created.title})
    return {"success": True, "blogPost": created.to_json()}


@router.put(
    "/{id}",
    summary="Update a blog post (admin)",
    dependencies=[Depends(require_admin)],
    responses={404: {"description": "Blog post not found"}},
)
async def update_blog_post(id: str, request: Request, post_update: BlogPostUpdate):
    """Partial update: only the sent fields change; updatedAt is always refreshed."""
    updated = await request.state.storage.update_blog_post(id, post_update.changes())
    await request.app.state.log.log_info("blog", "Blog post updated", {"id": id})
    return {"success": True, "blogPost": updated.to_json()}


@router.delete(
    "/{id}",
    summary="Delete a blog post (admin)",
    dependencies=[Depends(require_admin)],
    responses={404: {"description": "Blog post not found"}},
)
async def delete_blog_post(id: str, request: Request):
    await request.state.storage.delete_blog_post(id)
    await request.app.state.log.log_info("blog", "Blog post deleted", {"id": id})
    return {"success": True}
