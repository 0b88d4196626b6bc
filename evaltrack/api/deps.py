from uuid import UUID

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from evaltrack.core.errors import Unauthenticated
from evaltrack.core.security import TokenDecodeError, decode_access_token
from evaltrack.db.session import get_db
from evaltrack.services.profile_service import ProfileDirectory, SqlProfileDirectory


# Tokens are issued by the platform's auth service; this API only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl='/auth/token', auto_error=False)


def get_current_user_id(token: str | None = Depends(oauth2_scheme)) -> UUID:
    if not token:
        raise Unauthenticated('Missing bearer token')
    try:
        payload = decode_access_token(token)
        subject = payload.get('sub')
        if not subject:
            raise Unauthenticated('Invalid access token subject')
        return UUID(str(subject))
    except (TokenDecodeError, ValueError) as exc:
        raise Unauthenticated('Invalid access token') from exc


def get_profile_directory(db: Session = Depends(get_db)) -> ProfileDirectory:
    return SqlProfileDirectory(db)
