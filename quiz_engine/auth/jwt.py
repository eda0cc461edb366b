from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID
import os
from jose import JWTError, jwt
from dotenv import load_dotenv

load_dotenv()

SECRET_KEY = os.getenv("SECRET_KEY")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))

ACCESS_TOKEN_TYPE = "access"


# ---------------------------
# Create access token
# ---------------------------
def create_access_token(user_id: UUID, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Encode an access token in the account service's format.

    The account service owns login and issues these tokens; this helper
    mirrors its claims ({"user_id", "role", "type", "exp"}) for seed
    scripts and tests.
    """
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    claims = {
        "user_id": str(user_id),
        "role": role,
        "type": ACCESS_TOKEN_TYPE,
        "exp": expire,
    }
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


# ---------------------------
# Verify token
# ---------------------------
def verify_token(token: str, expected_type: str = ACCESS_TOKEN_TYPE) -> dict:
    """
    Decode a token and return its claims.

    Raises:
        JWTError: bad signature, expired, or not an ``expected_type`` token
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        raise JWTError("Invalid or expired token") from e

    if payload.get("type") != expected_type:
        raise JWTError(f"Invalid token type. Expected '{expected_type}'.")
    return payload
