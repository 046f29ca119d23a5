import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from bookcourier import config
from bookcourier.database import get_db
from bookcourier.models import User

logger = logging.getLogger(__name__)


def verify_token(authorization: Optional[str] = Header(None)) -> str:
    """Verify the identity provider's bearer token and return the caller's email."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Unauthorized access")

    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("unsupported auth scheme")
        claims = jwt.decode(
            token,
            config.JWT_SECRET,
            algorithms=[config.JWT_ALGORITHM],
            audience=config.JWT_AUDIENCE,
        )
    except (ValueError, JWTError) as exc:
        logger.info("Rejected token: %s", exc)
        raise HTTPException(status_code=401, detail="Unauthorized access")

    email = claims.get("email")
    if not email:
        raise HTTPException(status_code=401, detail="Unauthorized access")
    return email


def verify_admin(email: str = Depends(verify_token), db: Session = Depends(get_db)) -> str:
    user = db.query(User).filter_by(email=email).first()
    if not user or user.role != "admin":
        raise HTTPException(status_code=403, detail="forbidden access")
    return email
