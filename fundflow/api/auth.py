from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fundflow.database import get_db
from fundflow.dependencies import get_current_identity
from fundflow.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse, UserResponse
from fundflow.services import auth_service
from fundflow.utils.security import Identity

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=RegisterResponse)
def register(register_data: RegisterRequest, db: Session = Depends(get_db)):
    """Registers a new customer; the account waits for administrator approval"""
    user = auth_service.register(
        db,
        name=register_data.name,
        email=register_data.email,
        password=register_data.password,
        mobile=register_data.mobile,
    )
    return RegisterResponse(message="Registration successful! Awaiting admin approval.", userId=user.id)


@router.post("/login", response_model=LoginResponse)
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    """Exchanges email and password for a one-hour access token"""
    token, user = auth_service.login(db, login_data.email, login_data.password)
    return LoginResponse(
        token=token,
        userId=user.id,
        name=user.name,
        email=user.email,
        balance=float(user.balance),
        role=user.role.value,
    )


@router.get("/user/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Own profile and current balance"""
    user = auth_service.get_user(db, identity, user_id)
    return UserResponse(userId=user.id, name=user.name, email=user.email, balance=float(user.balance))
