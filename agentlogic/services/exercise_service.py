from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agentlogic.models.exercise import Exercise
from agentlogic.schemas.exercise import ExerciseCreate


class ExerciseService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_exercise(self, data: ExerciseCreate) -> Exercise:
        exercise = Exercise(
            title=data.title,
            description=data.description,
            language=data.language,
            difficulty=data.difficulty,
            function_name=data.function_name,
            # Stored in wire format so it reads back through the same schema
            test_cases=[case.model_dump(by_alias=True, exclude_none=True) for case in data.test_cases],
        )

        self.db.add(exercise)
        await self.db.flush()  # Ensure the exercise has an ID
        await self.db.commit()
        await self.db.refresh(exercise)  # load server-side created_at
        return exercise

    async def get_exercise(self, exercise_id: int) -> Optional[Exercise]:
        return await self.db.get(Exercise, exercise_id)

    async def list_exercises(
        self,
        language: Optional[str] = None,
        difficulty: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Exercise]:
        stmt = select(Exercise)
        if language:
            stmt = stmt.where(Exercise.language == language.lower())
        if difficulty:
            stmt = stmt.where(Exercise.difficulty == difficulty.lower())
        stmt = stmt.order_by(Exercise.id).limit(limit).offset(offset)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())
