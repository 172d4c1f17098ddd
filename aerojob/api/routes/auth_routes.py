"""
Authentication Routes

POST /auth/register - Register new student/alumni account
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
"""

from fastapi import APIRouter, BackgroundTasks, HTTPException, Depends
from sqlalchemy import text

from aerojob.db.postgres import get_db_session, fetch_one
from aerojob.core.auth import hash_password, verify_password, create_access_token, get_current_user
from aerojob.services.mailer import send_welcome_email
from aerojob.schemas.schemas import (
    RegisterRequest, LoginRequest, TokenResponse, UserResponse, MessageResponse
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(request: RegisterRequest, background_tasks: BackgroundTasks):
    """
    Register a new student or alumni account.

    A welcome email is sent in the background. Admin accounts are created
    with scripts/seed_admin.py.
    """
    email = request.email.lower()

    with get_db_session() as db:
        result = db.execute(
            text("SELECT user_id FROM users WHERE email = :email"),
            {"email": email}
        )
        if result.fetchone():
            raise HTTPException(status_code=400, detail="Email already registered")

        db.execute(
            text("""
                INSERT INTO users (email, password_hash, first_name, last_name, role)
                VALUES (:email, :password_hash, :first_name, :last_name, :role)
            """),
            {
                "email": email,
                "password_hash": hash_password(request.password),
                "first_name": request.first_name.strip(),
                "last_name": request.last_name.strip(),
                "role": request.role.value
            }
        )

    background_tasks.add_task(send_welcome_email, email, request.first_name.strip())

    return MessageResponse(message=f"Registered successfully as {request.role.value}. Please login.")


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    user = fetch_one(
        "SELECT user_id, password_hash, role, is_active FROM users WHERE email = :email",
        {"email": request.email.lower()}
    )

    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user["is_active"]:
        raise HTTPException(status_code=403, detail="Account deactivated")

    if not verify_password(request.password, user["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    with get_db_session() as db:
        db.execute(
            text("UPDATE users SET last_login = CURRENT_TIMESTAMP WHERE user_id = :id"),
            {"id": user["user_id"]}
        )

    token = create_access_token(data={"sub": str(user["user_id"]), "role": user["role"]})

    return TokenResponse(access_token=token, user_id=user["user_id"], role=user["role"])


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    row = fetch_one(
        """
        SELECT user_id, email, first_name, last_name, role, is_active, created_at
        FROM users WHERE user_id = :id
        """,
        {"id": user["user_id"]}
    )
    if not row:
        raise HTTPException(status_code=404, detail="User not found")

    return UserResponse(**row)
