from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import ValidationError as PydanticValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.messages import AuthMessages
from app.core.security import decode_identity_token, is_global_admin
from app.db.session import get_session
from app.models.category import Category
from app.schemas.auth import IdentityPayload
from app.services import permissions as permissions_service
from app.services.permissions import CategoryAccess

SessionDep = Annotated[AsyncSession, Depends(get_session)]

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """An authenticated caller as asserted by the identity provider."""

    email: str
    user_id: Optional[str] = None

    @property
    def is_global_admin(self) -> bool:
        return is_global_admin(self.email)


def _identity_from_token(token: str) -> Identity:
    try:
        payload = IdentityPayload(**decode_identity_token(token))
    except (JWTError, PydanticValidationError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=AuthMessages.INVALID_CREDENTIALS,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    if not payload.sub or not payload.sub.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=AuthMessages.INVALID_PAYLOAD,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Identity(email=payload.sub.strip().lower(), user_id=payload.uid)


async def get_optional_identity(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> Optional[Identity]:
    if credentials is None:
        return None
    return _identity_from_token(credentials.credentials)


async def get_current_identity(
    identity: Annotated[Optional[Identity], Depends(get_optional_identity)],
) -> Identity:
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=AuthMessages.INVALID_CREDENTIALS,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


async def require_global_admin(
    identity: Annotated[Identity, Depends(get_current_identity)],
) -> Identity:
    if not identity.is_global_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=AuthMessages.ADMIN_REQUIRED)
    return identity


OptionalIdentityDep = Annotated[Optional[Identity], Depends(get_optional_identity)]
IdentityDep = Annotated[Identity, Depends(get_current_identity)]
AdminIdentityDep = Annotated[Identity, Depends(require_global_admin)]


async def resolve_category_access(
    session: AsyncSession,
    identity: Optional[Identity],
    category: Category,
) -> CategoryAccess:
    if identity is None:
        return permissions_service.NO_ACCESS
    return await permissions_service.resolve_for_category(
        session,
        email=identity.email,
        is_global_admin=identity.is_global_admin,
        category=category,
    )
