from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from blog_api.core.exceptions import PersistenceError, ValidationError
from blog_api.core.responses import (
    internal_error_response,
    not_found_response,
    success_response,
    validation_error_response,
)
from blog_api.domain.validation import validate_page_size, validate_post
from blog_api.repositories.base import DEFAULT_PAGE_SIZE
from blog_api.repositories.post_repository import PostRepository
from blog_api.resources import to_collection, to_representation
from blog_api.services.session_service import AuthContext, require_auth

from .payload import request_payload

router = APIRouter(prefix="/posts", tags=["posts"])
post_repository = PostRepository()

NOT_FOUND = "Post not found"


@router.get("")
def list_posts(request: Request, context: AuthContext = Depends(require_auth)):
    params = dict(request.query_params)
    try:
        size = validate_page_size(params.get("size"), DEFAULT_PAGE_SIZE)
    except ValidationError as exc:
        return validation_error_response(exc.message, exc.errors)
    page = post_repository.paginated_list(size, params)

    def page_url(number: int) -> str:
        return str(request.url.include_query_params(page=number))

    return JSONResponse(jsonable_encoder(to_collection(page, page_url)))


@router.post("", status_code=201)
def create_post(context: AuthContext = Depends(require_auth), payload: dict = Depends(request_payload)):
    try:
        data = validate_post(payload)
    except ValidationError as exc:
        return validation_error_response(exc.message, exc.errors)
    try:
        post = post_repository.save(data, acting_user_id=context.user.id)
    except PersistenceError:
        return internal_error_response()
    return success_response("Successfully created post", to_representation(post), status=201)


@router.get("/{post_id}")
def show_post(post_id: int, context: AuthContext = Depends(require_auth)):
    post = post_repository.find(post_id)
    if post is None:
        return not_found_response(NOT_FOUND)
    return success_response("Successfully retrieved post", to_representation(post))


@router.api_route("/{post_id}", methods=["PATCH", "PUT"])
def update_post(post_id: int, context: AuthContext = Depends(require_auth), payload: dict = Depends(request_payload)):
    if post_repository.find(post_id) is None:
        return not_found_response(NOT_FOUND)
    try:
        data = validate_post(payload, partial=True, post_id=post_id)
    except ValidationError as exc:
        return validation_error_response(exc.message, exc.errors)
    try:
        post = post_repository.update(data, post_id)
    except PersistenceError:
        return internal_error_response()
    if post is None:
        return not_found_response(NOT_FOUND)
    return success_response("Successfully updated post", to_representation(post))


@router.delete("/{post_id}")
def delete_post(post_id: int, context: AuthContext = Depends(require_auth)):
    if post_repository.find(post_id) is None:
        return not_found_response(NOT_FOUND)
    try:
        post_repository.delete(post_id)
    except PersistenceError:
        return internal_error_response()
    return success_response("Successfully deleted post")
