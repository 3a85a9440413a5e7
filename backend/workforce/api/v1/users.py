"""
Users API – account management (admin only, except reading oneself).
"""
import logging
import uuid

from fastapi import APIRouter, HTTPException, status
from pydantic import ValidationError
from sqlalchemy import select, or_

from workforce.api.deps import DB, AdminUser, CurrentUser, ensure_self_or_admin
from workforce.core.security import hash_password
from workforce.models.user import User
from workforce.schemas.user import UserCreate, UserUpdate, UserOut, BulkUserCreate, BulkUserResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


async def _find_duplicate(db, username: str, email: str) -> User | None:
    result = await db.execute(
        select(User).where(or_(User.username == username, User.email == email))
    )
    return result.scalars().first()


def _new_user(payload: UserCreate) -> User:
    return User(
        username=payload.username,
        email=payload.email,
        hashed_password=hash_password(payload.password),
        name=payload.name,
        phone=payload.phone,
        position=payload.position,
        role=payload.role,
        is_active=payload.is_active,
    )


@router.get("", response_model=list[UserOut])
async def list_users(current_user: AdminUser, db: DB, role: str | None = None):
    query = select(User)
    if role:
        query = query.where(User.role == role)
    result = await db.execute(query.order_by(User.name))
    return result.scalars().all()


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserCreate, current_user: AdminUser, db: DB):
    if await _find_duplicate(db, payload.username, payload.email):
        raise HTTPException(status_code=400, detail="Username or email already registered")

    user = _new_user(payload)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("User %s created by %s", user.username, current_user.username)
    return user


@router.post("/bulk", response_model=BulkUserResult, status_code=status.HTTP_201_CREATED)
async def create_users_bulk(payload: BulkUserCreate, current_user: AdminUser, db: DB):
    """Create several users; invalid or duplicate rows are reported, not fatal."""
    outcome = BulkUserResult()
    seen: set[str] = set()

    for index, row in enumerate(payload.users):
        label = str(row.get("username") or row.get("email") or f"row {index + 1}")
        try:
            data = UserCreate.model_validate(row)
        except ValidationError as e:
            outcome.failed.append(f"{label}: {e.errors()[0]['msg']}")
            continue

        if data.username in seen or data.email in seen or await _find_duplicate(db, data.username, data.email):
            outcome.failed.append(f"{label}: username or email already registered")
            continue

        db.add(_new_user(data))
        seen.update((data.username, data.email))
        outcome.created_count += 1

    outcome.failed_count = len(outcome.failed)
    await db.commit()
    logger.info(
        "Bulk import by %s: %d created, %d failed",
        current_user.username, outcome.created_count, outcome.failed_count,
    )
    return outcome


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: uuid.UUID, current_user: CurrentUser, db: DB):
    ensure_self_or_admin(current_user, user_id)
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.put("/{user_id}", response_model=UserOut)
async def update_user(user_id: uuid.UUID, payload: UserUpdate, current_user: AdminUser, db: DB):
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if user.id == current_user.id and payload.role and payload.role != current_user.role:
        raise HTTPException(status_code=400, detail="You cannot change your own role")
    if user.id == current_user.id and payload.is_active is False:
        raise HTTPException(status_code=400, detail="You cannot deactivate yourself")

    updates = payload.model_dump(exclude_unset=True)
    password = updates.pop("password", None)
    if "email" in updates and updates["email"] != user.email:
        taken = await db.execute(select(User.id).where(User.email == updates["email"]))
        if taken.scalar_one_or_none() is not None:
            raise HTTPException(status_code=400, detail="Email already registered")

    for field, value in updates.items():
        if value is not None:
            setattr(user, field, value)
    if password:
        if len(password) < 8:
            raise HTTPException(status_code=400, detail="Password must be at least 8 characters long")
        user.hashed_password = hash_password(password)

    await db.commit()
    await db.refresh(user)
    return user
