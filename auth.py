from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel
from sqlalchemy.orm import Session

from database import get_users_db
from models import User

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
# Only documents the scheme in OpenAPI; the middleware does the decoding.
security = HTTPBearer(auto_error=False)


class Principal(BaseModel):
    username: str
    role: str = "user"


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def create_access_token(data: dict, secret_key: str, algorithm: str,
                        expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=15)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def decode_principal(token: str, secret_key: str, algorithm: str) -> Optional[Principal]:
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    except JWTError:
        return None
    username = payload.get("sub")
    if not username:
        return None
    return Principal(username=username, role=payload.get("role") or "user")


class AuthorizationMiddleware:
    """Resolves the bearer token of every request into ``request.state.principal``.

    Requests without a valid token carry ``None``; endpoints decide whether
    that is acceptable through ``require_user`` and ``require_role``.
    """

    def __init__(self, app, secret_key: str, algorithm: str):
        self.app = app
        self.secret_key = secret_key
        self.algorithm = algorithm

    async def __call__(self, scope, receive, send):
        if scope["type"] in ("http", "websocket"):
            principal = None
            for name, value in scope.get("headers", []):
                if name == b"authorization":
                    scheme, _, token = value.decode("latin-1").partition(" ")
                    if scheme.lower() == "bearer" and token.strip():
                        principal = decode_principal(token.strip(), self.secret_key, self.algorithm)
                    break
            scope.setdefault("state", {})["principal"] = principal
        await self.app(scope, receive, send)


def _unauthorized():
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_user(
    request: Request,
    _credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Principal:
    principal = getattr(request.state, "principal", None)
    if principal is None:
        raise _unauthorized()
    return principal


def get_current_user(principal: Principal = Depends(require_user),
                     db: Session = Depends(get_users_db)) -> User:
    user = db.query(User).filter(User.username == principal.username).first()
    if user is None or not user.is_active:
        raise _unauthorized()
    return user


def require_role(role: str):
    """Checks the role stored on the current user, not the token claim."""
    def checker(user: User = Depends(get_current_user)) -> User:
        if user.role != role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
            )
        return user

    return checker
