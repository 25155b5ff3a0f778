"""Seed the default eating-habits survey and its 8 questions."""
import asyncio
import sys
sys.path.insert(0, ".")

from dietwise.database import async_session_factory, engine
from dietwise.services.survey_service import SurveyService


async def seed():
    service = SurveyService()
    async with async_session_factory() as session:
        survey = await service.get_or_create_default(session)
        await session.commit()
        print(f"  Active survey: {survey.title} ({survey.id})")
        for q in survey.questions:
            print(f"  Question {q.order}: {q.text}")
    await engine.dispose()
    print("Done seeding survey.")


if __name__ == "__main__":
    asyncio.run(seed())
