from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from jose import JWTError
import uuid


from quiz_engine.database import get_db
from quiz_engine.models import User, UserRole
from quiz_engine.auth.jwt import ACCESS_TOKEN_TYPE, verify_token


bearer_scheme = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Resolve the bearer access token to an active User.

    Tokens are issued by the account service; only ``user_id`` is read
    from the claims, the role always comes from the users table.
    """
    try:
        payload = verify_token(credentials.credentials, expected_type=ACCESS_TOKEN_TYPE)
        user_id = uuid.UUID(str(payload.get("user_id")))
    except (JWTError, ValueError):  # ValueError for a missing or malformed user_id
        raise _unauthorized("Invalid or expired token")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise _unauthorized("User is deactivated")
    return user


def require_role(role: UserRole):
    """Dependency factory: the current user, if it has ``role``."""
    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role != role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Only {role.value}s can access this resource"
            )
        return current_user

    checker.__name__ = f"is_{role.value}"
    return checker


is_teacher = require_role(UserRole.TEACHER)
is_student = require_role(UserRole.STUDENT)
