import asyncio
from quiz_engine.database import engine, Base

# Import all models here so SQLAlchemy knows them
from quiz_engine.models import User, Classroom, ClassroomMember, Quiz, QuizPage, QuizAttempt, Notification  # noqa: F401


async def create_tables():
    async with engine.begin() as conn:
        print("🚀 Creating quiz engine tables...")
        await conn.run_sync(Base.metadata.create_all)

    for table in Base.metadata.sorted_tables:
        print(f"   - {table.name}")
    print("✅ All tables created successfully!")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(create_tables())
