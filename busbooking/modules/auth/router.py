from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import select as sa_select
from sqlalchemy.exc import IntegrityError

from busbooking.db.session import Database
from busbooking.models.models import User
from busbooking.schemas.auth import AuthOut, RegisterIn, UserOut
from busbooking.services import auth as auth_service
from busbooking.services.deps import get_database

router = APIRouter(tags=["auth"])


def _auth_out(request: Request, user: User) -> AuthOut:
    token = auth_service.create_access_token(request.app.state.settings, user.id, user.role)
    return AuthOut(
        access_token=token,
        user=UserOut(id=str(user.id), username=user.username, email=user.email, role=user.role),
    )


@router.post("/register", response_model=AuthOut, status_code=201)
async def register(payload: RegisterIn, request: Request, database: Database = Depends(get_database)):
    email = payload.email.lower()
    async with database.session() as db:
        res = await db.execute(sa_select(User).where(User.email == email))
        if res.scalars().first():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")
        user = User(
            username=payload.username,
            email=email,
            hashed_password=auth_service.hash_password(payload.password),
            role="user",
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")
        await db.refresh(user)
    return _auth_out(request, user)


@router.post("/login", response_model=AuthOut)
async def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    database: Database = Depends(get_database),
):
    identifier = form_data.username.lower()
    async with database.session() as db:
        res = await db.execute(sa_select(User).where(User.email == identifier))
        user = res.scalars().first()
    if not user or not auth_service.verify_password(form_data.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return _auth_out(request, user)
