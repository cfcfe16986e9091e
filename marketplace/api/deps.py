# marketplace/api/deps.py
from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from marketplace.core.config import settings
from marketplace.core.errors import Unauthenticated
from marketplace.core.permissions import Caller, CallerRole
from marketplace.crud import crud_partner
from marketplace.db.session import get_db
from marketplace.schemas.token import TokenPayload

# This tells FastAPI where to look for the token.
# The `tokenUrl` doesn't have to be a real endpoint in this service,
# it's just for the OpenAPI documentation.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


def get_current_user(token: Optional[str] = Depends(oauth2_scheme)) -> TokenPayload:
    if not token:
        raise Unauthenticated(message="Missing bearer token.")
    try:
        # Decode the token using the secret key
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        # Validate the payload against our schema
        token_data = TokenPayload(**payload)
    except (JWTError, ValueError):
        # Catches any error from jose or Pydantic validation
        raise Unauthenticated(message="Could not validate credentials.")

    return token_data


def get_caller(
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(get_current_user),
) -> Caller:
    """Resolve the token subject to a Caller, re-reading partner ownership per request."""
    partner_ids = frozenset(crud_partner.list_ids_for_owner(db, current_user.sub))
    if (current_user.role or "").lower() == CallerRole.ADMIN.value:
        role = CallerRole.ADMIN
    elif partner_ids:
        role = CallerRole.PARTNER_OWNER
    else:
        role = CallerRole.CONSUMER
    return Caller(user_id=current_user.sub, role=role, partner_ids=partner_ids)
