from typing import List

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from busbooking.schemas.auth import Principal
from busbooking.services import auth as auth_service


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


async def get_current_user(request: Request, token: str = Depends(oauth2_scheme)) -> Principal:
    try:
        return auth_service.verify_access_token(request.app.state.settings, token)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


def role_required(allowed: List[str]):
    async def _dep(current_user: Principal = Depends(get_current_user)) -> Principal:
        if current_user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current_user

    return _dep
