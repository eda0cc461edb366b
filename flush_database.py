import asyncio
import sys
from quiz_engine.database import engine, Base

# Import all models so SQLAlchemy knows them
from quiz_engine.models import User, Classroom, ClassroomMember, Quiz, QuizPage, QuizAttempt, Notification  # noqa: F401


async def flush_database():
    async with engine.begin() as conn:
        print("⚠️ Dropping all tables (quizzes, pages, attempts, notifications, users)...")
        await conn.run_sync(Base.metadata.drop_all)
        print("✅ All tables dropped successfully!")

        print("🚀 Recreating tables...")
        await conn.run_sync(Base.metadata.create_all)
        print("✅ All tables recreated successfully!")

    await engine.dispose()


if __name__ == "__main__":
    if "--yes" not in sys.argv:
        answer = input(f"This wipes every table in {engine.url.database}. Continue? [y/N] ").strip().lower()
        if answer != "y":
            print("Aborted.")
            sys.exit(1)
    asyncio.run(flush_database())
