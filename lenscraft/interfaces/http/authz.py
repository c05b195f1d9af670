from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from ...config import settings
from ...domain.entities import Role

bearer = HTTPBearer()


def get_claims(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> dict:
    try:
        payload = jwt.decode(creds.credentials, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        return payload
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def get_user_email(claims: dict = Depends(get_claims)) -> str:
    sub = claims.get("sub")
    if not sub:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return sub


def _require_role(claims: dict, role: Role) -> dict:
    # tokens issued before roles existed carry no claim
    if claims.get("role", Role.STUDENT.value) != role.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"{role.value.capitalize()} required")
    return claims


def require_admin(claims: dict = Depends(get_claims)) -> dict:
    return _require_role(claims, Role.ADMIN)


def require_instructor(claims: dict = Depends(get_claims)) -> dict:
    return _require_role(claims, Role.INSTRUCTOR)


def ensure_same_user(requested: str, user_email: str) -> None:
    """Users may only read or write their own cart and purchases."""
    if requested != user_email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="bad auth")
