from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from blog_api.core.exceptions import InvalidCredentials, RegistrationFailed, ValidationError
from blog_api.core.responses import (
    internal_error_response,
    not_found_response,
    success_response,
    unauthorized_response,
    validation_error_response,
)
from blog_api.domain.validation import validate_login, validate_registration
from blog_api.repositories.auth_repository import AuthRepository, AuthResult
from blog_api.resources import to_representation
from blog_api.services.session_service import AuthContext, require_auth

from .payload import request_payload

router = APIRouter(tags=["auth"])
auth_repository = AuthRepository()


def _token_payload(result: AuthResult) -> dict[str, Any]:
    return {
        "user": to_representation(result.user),
        "access_token": result.access_token,
        "token_type": "Bearer",
    }


@router.post("/register", status_code=201)
def register(payload: dict = Depends(request_payload)):
    try:
        data = validate_registration(payload)
    except ValidationError as exc:
        return validation_error_response(exc.message, exc.errors)
    try:
        result = auth_repository.register(data)
    except RegistrationFailed as exc:
        return internal_error_response(exc.message)
    return success_response("User registered successfully!", _token_payload(result), status=201)


@router.post("/login")
def login(payload: dict = Depends(request_payload)):
    try:
        credentials = validate_login(payload)
    except ValidationError as exc:
        return validation_error_response(exc.message, exc.errors)
    try:
        result = auth_repository.login(credentials)
    except InvalidCredentials as exc:
        return unauthorized_response(exc.message)
    return success_response("Login successful", _token_payload(result))


@router.post("/logout")
def logout(context: AuthContext = Depends(require_auth)):
    auth_repository.logout(context)
    return success_response("Logout successful")


@router.get("/user")
def current_user(context: AuthContext = Depends(require_auth)):
    return success_response("User retrieved successfully", to_representation(auth_repository.current_user(context)))


@router.get("/user/{user_id}")
def show_user(user_id: int, context: AuthContext = Depends(require_auth)):
    user = auth_repository.find(user_id)
    if user is None:
        return not_found_response("User not found")
    return success_response("Successfully retrieved user", to_representation(user))
