"""
API Key Routes

Handles API key generation, validation, usage, deactivation and rotation.
Responses never carry stored hashes; the plaintext secret is only returned
by generation, rotation and validation.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.api.error import ClientError, ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.keys import ApiKeyUseCase, KeyRotationUseCase
from src.depends import SecurityServices, get_services, get_unit_of_work
from src.domain.entities import ApiKey, KeyUsageStats
from src.domain.errors import NotFound

router = APIRouter(tags=["API Keys"], dependencies=[Depends(verify_admin_api_key)])


class GenerateKeyRequest(BaseModel):
    """POST /keys request payload"""

    name: str = Field(min_length=1, max_length=200)
    user_id: Optional[str] = None
    permissions: Optional[List[str]] = None
    expiry_days: Optional[int] = Field(default=None, gt=0, le=3650)


class ValidateKeyRequest(BaseModel):
    """POST /keys/validate request payload"""

    key: str = Field(min_length=1)


class RecordUsageRequest(BaseModel):
    """POST /keys/{key_id}/usage request payload"""

    success: bool = True


class ApiKeyResponse(BaseModel):
    """Key record without its secret"""

    id: str
    name: str
    user_id: Optional[str]
    permissions: List[str]
    created_at: datetime
    expires_at: datetime
    last_used_at: Optional[datetime]
    is_active: bool
    deactivate_after: Optional[datetime]
    replaced_by: Optional[str]
    metadata: Dict[str, Any]

    @classmethod
    def from_entity(cls, api_key: ApiKey) -> "ApiKeyResponse":
        return cls(
            id=api_key.id,
            name=api_key.name,
            user_id=api_key.user_id,
            permissions=api_key.permissions,
            created_at=api_key.created_at,
            expires_at=api_key.expires_at,
            last_used_at=api_key.last_used_at,
            is_active=api_key.is_active,
            deactivate_after=api_key.deactivate_after,
            replaced_by=api_key.replaced_by,
            metadata=api_key.key_metadata,
        )


class IssuedKeyResponse(ApiKeyResponse):
    """Key record plus the plaintext secret"""

    key: str

    @classmethod
    def from_entity(cls, api_key: ApiKey) -> "IssuedKeyResponse":
        base = ApiKeyResponse.from_entity(api_key)
        return cls(key=api_key.key, **base.model_dump())


class UserKeysResponse(BaseModel):
    keys: List[ApiKeyResponse]


class RotateKeysResponse(BaseModel):
    rotated: List[IssuedKeyResponse]


def _key_use_case(services: SecurityServices, uow: UnitOfWork) -> ApiKeyUseCase:
    return ApiKeyUseCase(uow, services.key_settings, clock=services.clock)


@router.post("/keys", status_code=status.HTTP_201_CREATED, response_model=IssuedKeyResponse)
async def generate_api_key(
    request: GenerateKeyRequest,
    services: SecurityServices = Depends(get_services),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Generate API Key

    The plaintext secret is returned once and cannot be recovered.

    Raises:
        - 500 Internal Server Error: Store failure
    """
    api_key = await _key_use_case(services, uow).generate_api_key(
        request.name, request.user_id, request.permissions, request.expiry_days
    )
    return IssuedKeyResponse.from_entity(api_key)


@router.post("/keys/validate", response_model=IssuedKeyResponse)
async def validate_api_key(
    request: ValidateKeyRequest,
    services: SecurityServices = Depends(get_services),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Validate API Key

    Raises:
        - 404 Not Found: INVALID_KEY when unknown, inactive, expired or past its grace period
    """
    api_key = await _key_use_case(services, uow).validate_api_key(request.key)
    if api_key is None:
        raise ClientError(
            NotFound("API key is not valid", code="INVALID_KEY"),
            status_code=status.HTTP_404_NOT_FOUND,
        )
    return IssuedKeyResponse.from_entity(api_key)


@router.delete("/keys/{key_id}", response_model=ApiKeyResponse)
async def deactivate_api_key(
    key_id: str,
    services: SecurityServices = Depends(get_services),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Deactivate API Key

    Raises:
        - 404 Not Found: KEY_NOT_FOUND
        - 500 Internal Server Error: Store failure
    """
    result = await _key_use_case(services, uow).deactivate_key(key_id)

    if result.is_err():
        error = result.error
        if error.code == "KEY_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return ApiKeyResponse.from_entity(result.value)


@router.get("/keys/{key_id}/stats", response_model=KeyUsageStats)
async def get_key_stats(
    key_id: str,
    services: SecurityServices = Depends(get_services),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    stats = await _key_use_case(services, uow).get_key_stats(key_id)
    return stats if stats is not None else KeyUsageStats(key_id=key_id)


@router.post("/keys/{key_id}/usage", response_model=KeyUsageStats)
async def record_key_usage(
    key_id: str,
    request: RecordUsageRequest,
    services: SecurityServices = Depends(get_services),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Record API Key Usage

    Called by the service that accepted a request made with the key.

    Raises:
        - 404 Not Found: KEY_NOT_FOUND
        - 500 Internal Server Error: Store failure
    """
    result = await _key_use_case(services, uow).record_key_usage(key_id, request.success)

    if result.is_err():
        error = result.error
        if error.code == "KEY_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


@router.get("/users/{user_id}/keys", response_model=UserKeysResponse)
async def get_user_keys(
    user_id: str,
    services: SecurityServices = Depends(get_services),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    keys = await _key_use_case(services, uow).get_user_keys(user_id)
    return UserKeysResponse(keys=[ApiKeyResponse.from_entity(k) for k in keys])


@router.post("/users/{user_id}/keys/rotate", response_model=RotateKeysResponse)
async def rotate_user_keys(
    user_id: str,
    services: SecurityServices = Depends(get_services),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Rotate User Keys

    Issues replacements for keys older than the rotation interval. Old keys
    keep validating until their grace period ends.
    """
    use_case = KeyRotationUseCase(
        uow, _key_use_case(services, uow), services.key_settings, clock=services.clock
    )
    rotated = await use_case.rotate_user_keys(user_id)
    return RotateKeysResponse(rotated=[IssuedKeyResponse.from_entity(k) for k in rotated])
