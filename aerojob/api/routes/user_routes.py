"""
User Routes (admin)

GET /users - List users (role, q filters)
PUT /users/{user_id}/status - Activate / deactivate a user
DELETE /users/{user_id} - Delete a user
"""

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy import text
from typing import List, Optional

from aerojob.db.postgres import get_db_session, execute_raw_sql
from aerojob.core.auth import get_current_admin
from aerojob.schemas.schemas import UserResponse, UserStatusUpdate, UserRole, MessageResponse

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserResponse])
async def list_users(
    role: Optional[UserRole] = Query(None),
    q: Optional[str] = Query(None, description="Search in name or email"),
    admin: dict = Depends(get_current_admin)
):
    """List users, newest first. Admin only."""
    sql = """
        SELECT user_id, email, first_name, last_name, role, is_active, created_at
        FROM users WHERE 1 = 1
    """
    params = {}

    if role:
        sql += " AND role = :role"
        params["role"] = role.value
    if q:
        sql += " AND (email ILIKE :q OR first_name ILIKE :q OR last_name ILIKE :q)"
        params["q"] = f"%{q}%"

    sql += " ORDER BY created_at DESC"
    return [UserResponse(**r) for r in execute_raw_sql(sql, params)]


@router.put("/{user_id}/status", response_model=MessageResponse)
async def update_user_status(user_id: int, update: UserStatusUpdate, admin: dict = Depends(get_current_admin)):
    """Activate or deactivate an account. Deactivated users cannot log in."""
    if user_id == admin["user_id"] and not update.is_active:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")

    with get_db_session() as db:
        result = db.execute(
            text("UPDATE users SET is_active = :active, updated_at = CURRENT_TIMESTAMP WHERE user_id = :id"),
            {"active": update.is_active, "id": user_id}
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="User not found")

    state = "activated" if update.is_active else "deactivated"
    return MessageResponse(message=f"User {state}")


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: int, admin: dict = Depends(get_current_admin)):
    """Delete a user account. Admin only."""
    if user_id == admin["user_id"]:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    with get_db_session() as db:
        result = db.execute(text("DELETE FROM users WHERE user_id = :id"), {"id": user_id})
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="User not found")

    return MessageResponse(message="User deleted successfully")
