# utils/tokenJWT.py
from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models import users as models
from services.tenant_scope import Actor, MANUFACTURER_ROLE, normalize_role, resolve_manufacturer_id
from utils.exceptions import ForbiddenError

# Authorization scheme; tokens are issued by the identity service
bearer_scheme = HTTPBearer()

# Generate a new JWT access token
def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

# Retrieve the currently authenticated user based on the JWT token
def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db)
):
    token = credentials.credentials
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        email: str = payload.get("sub")
        # Ensure email is present in the token payload
        if email is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    user = db.query(models.User).filter(models.User.email == email).first()
    if user is None:
        raise credentials_exception
    return user

# Build the Actor for this request and keep it on request.state for response redaction
def get_actor(
    request: Request,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Actor:
    role = normalize_role(current_user.role)
    manufacturer_id = None
    if role == MANUFACTURER_ROLE:
        manufacturer_id = resolve_manufacturer_id(db, current_user.id)
    actor = Actor(user_id=current_user.id, role=role, manufacturer_id=manufacturer_id)
    request.state.actor = actor
    return actor

# Dependency factory for Role-Based Access Control
def role_required(*allowed_roles):
    allowed = {normalize_role(r) for r in allowed_roles}

    def _checker(actor: Actor = Depends(get_actor)):
        if allowed and actor.role not in allowed:
            raise ForbiddenError("Forbidden", {"role": actor.role})
        return actor
    return _checker
