from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """Registration form"""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    mobile: str = Field(..., min_length=1, max_length=20)


class RegisterResponse(BaseModel):
    message: str
    userId: int


class LoginRequest(BaseModel):
    """Login form"""
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    """Token plus the account snapshot the dashboard starts from"""
    token: str
    token_type: str = "bearer"
    userId: int
    name: str
    email: str
    balance: float
    role: str


class UserResponse(BaseModel):
    """Own profile, without credentials"""
    userId: int
    name: str
    email: str
    balance: float


class MessageResponse(BaseModel):
    message: str
