from fastapi import APIRouter, Depends, HTTPException, status

from app.core.auth import create_access_token, get_current_user
from app.core.security import verify_password
from app.db.session import get_store
from app.db.store import DocumentStore
from app.models.user import UserCreate, UserInDB, UserResponse
from app.repositories.user_repo import UserRepository
from app.schemas.auth import TokenResponse, UserLogin, UserSignup

router = APIRouter()


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(user_data: UserSignup, store: DocumentStore = Depends(get_store)):
    """Register a new user"""
    user_repo = UserRepository(store)

    if await user_repo.get_user_by_email(user_data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    user = await user_repo.create_user(UserCreate(**user_data.model_dump()))
    return TokenResponse(
        access_token=create_access_token(user.id),
        user=user.to_response()
    )


@router.post("/login", response_model=TokenResponse)
async def login(credentials: UserLogin, store: DocumentStore = Depends(get_store)):
    """Login with email and password"""
    user = await UserRepository(store).get_user_by_email(credentials.email)

    if user is None or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )

    return TokenResponse(
        access_token=create_access_token(user.id),
        user=user.to_response()
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: UserInDB = Depends(get_current_user)):
    """Get current user information"""
    return current_user.to_response()
