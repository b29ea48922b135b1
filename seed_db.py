import asyncio

from sqlalchemy import select

from app import models  # noqa: F401
from app.database import async_session, init_models
from app.models.idea import Idea, IdeaStatus
from app.models.user import User, UserRole
from app.routers.auth import hash_password


async def _get_or_create_user(session, **fields) -> User:
    result = await session.execute(select(User).where(User.email == fields["email"]))
    user = result.scalar_one_or_none()
    if user:
        return user
    user = User(**fields)
    session.add(user)
    await session.flush()
    return user


async def async_main():
    await init_models()

    async with async_session() as session:
        admin = await _get_or_create_user(
            session,
            email="admin@example.com",
            password_hash=hash_password("admin123"),
            first_name="Admin",
            last_name="User",
            employee_id="ADMIN-001",
            department="Management",
            position="System Administrator",
            role=UserRole.ADMIN,
            email_verified=True,
            skills=["System Administration", "Security"],
        )
        user = await _get_or_create_user(
            session,
            email="user@example.com",
            password_hash=hash_password("user1234"),
            first_name="Ahmed",
            last_name="Khan",
            employee_id="EMP-2024-001",
            department="Engineering",
            position="Senior Software Engineer",
            role=UserRole.USER,
            email_verified=True,
            skills=["Python", "React", "Machine Learning"],
        )

        existing = await session.execute(select(Idea).where(Idea.user_id == user.id))
        if not existing.scalars().first():
            session.add_all([
                Idea(
                    user_id=user.id,
                    title="AI-Powered Inventory Management",
                    description="An intelligent system that predicts inventory needs using machine learning.",
                    category="Business Intelligence",
                    problem_statement="Manual inventory management leads to stockouts and overstocking.",
                    solution="Analyse sales patterns and seasonality to predict optimal stock levels.",
                    target_audience="Retail businesses and warehouses",
                    tech_stack=["Python", "TensorFlow", "React"],
                    expected_outcome="Reduced inventory costs by 20%",
                    timeline="5-6 weeks",
                    resources="ML expertise, cloud computing resources",
                    status=IdeaStatus.IN_PROGRESS,
                    progress=75,
                    github_url="https://github.com/example/inventory-ai",
                    demo_url="https://inventory-ai-demo.example.com",
                ),
                Idea(
                    user_id=user.id,
                    title="Smart Customer Support Bot",
                    description="Chatbot that answers common support questions instantly.",
                    category="Customer Service",
                    problem_statement="Support teams are overwhelmed with repetitive queries.",
                    solution="An assistant that handles common queries and escalates complex ones.",
                    tech_stack=["OpenAI API", "React", "FastAPI"],
                    status=IdeaStatus.PENDING,
                    progress=0,
                ),
            ])

        await session.commit()
    print(f"Database seeded (admin: {admin.email}, user: {user.email}).")


if __name__ == "__main__":
    asyncio.run(async_main())
