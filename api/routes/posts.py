"""Post routes: list, author, edit and delete scheduled posts."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from api.auth.dependencies import CurrentUser, get_current_user
from api.models.api_models import (
    PostCreateRequest,
    PostEnvelope,
    PostListResponse,
    PostResponse,
    PostUpdateRequest,
)
from api.responses import ERROR_RESPONSES, SuccessResponse
from api.services.post_service import PostService
from postboard.db.engine import get_session_dependency

router = APIRouter(prefix="/posts", tags=["posts"])


def get_post_service(session: Session = Depends(get_session_dependency)) -> PostService:
    return PostService(session)


@router.get("", response_model=PostListResponse, responses=ERROR_RESPONSES)
def list_posts(
    current_user: CurrentUser = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
):
    """List the caller's posts, soonest scheduled first."""
    posts = service.list_posts(current_user.user_id)
    return PostListResponse(posts=[PostResponse.model_validate(p) for p in posts])


@router.post(
    "",
    response_model=PostEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
def create_post(
    request: PostCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
):
    """Schedule a new post.

    Requires title, content, mediaType, a future scheduledFor and at least
    one selected account.
    """
    post = service.create_post(current_user.user_id, request.model_dump(exclude_unset=True))
    return PostEnvelope(post=PostResponse.model_validate(post))


@router.get("/{post_id}", response_model=PostEnvelope, responses=ERROR_RESPONSES)
def get_post(
    post_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
):
    post = service.get_post(post_id, current_user.user_id)
    return PostEnvelope(post=PostResponse.model_validate(post))


@router.put("/{post_id}", response_model=PostEnvelope, responses=ERROR_RESPONSES)
def update_post(
    post_id: UUID,
    request: PostUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
):
    """Apply a partial update. Published posts are rejected with 400."""
    post = service.update_post(
        post_id, current_user.user_id, request.model_dump(exclude_unset=True)
    )
    return PostEnvelope(post=PostResponse.model_validate(post))


@router.delete("/{post_id}", response_model=SuccessResponse, responses=ERROR_RESPONSES)
def delete_post(
    post_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
):
    """Delete a draft or scheduled post. Published posts are rejected with 400."""
    service.delete_post(post_id, current_user.user_id)
    return SuccessResponse(message="Post deleted successfully")
