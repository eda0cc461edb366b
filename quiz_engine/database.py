import os
from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base

# ---------------------------
# Load environment variables
# ---------------------------
load_dotenv()

# ---------------------------
# Database URL
# ---------------------------
DATABASE_URL = os.getenv("DATABASE_URL")

if not DATABASE_URL:
    raise ValueError("DATABASE_URL is not set in the .env file")

SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")

# ---------------------------
# Engine
# ---------------------------
engine_options = {"echo": SQL_ECHO, "future": True}
if not DATABASE_URL.startswith("sqlite"):
    # drop connections the server closed while idle
    engine_options["pool_pre_ping"] = True

engine = create_async_engine(DATABASE_URL, **engine_options)

# ---------------------------
# Session Local
# ---------------------------
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False,
)

# ---------------------------
# Base model
# ---------------------------
Base = declarative_base()

# ---------------------------
# Dependency for FastAPI
# ---------------------------
async def get_db():
    """One session per request; uncommitted work is rolled back if the request fails."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
