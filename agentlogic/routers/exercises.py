import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from agentlogic.core.config import RUN_TESTS_RATE_LIMIT
from agentlogic.core.db import get_db
from agentlogic.exceptions import ExerciseNotFoundError
from agentlogic.execution.orchestrator import TestBatchOrchestrator
from agentlogic.middleware.rate_limit import limiter
from agentlogic.routers.test_execution import execute_batch, get_orchestrator, internal_error_response
from agentlogic.schemas.exercise import ExerciseCreate, ExerciseListResponse, ExerciseOut, ExerciseResponse
from agentlogic.schemas.test_execution import ExerciseRunRequest, RunTestsRequest, RunTestsResponse, TestCase
from agentlogic.services.exercise_service import ExerciseService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/exercises", tags=["exercises"])


@router.post("/run-tests", response_model=RunTestsResponse)
@limiter.limit(RUN_TESTS_RATE_LIMIT)
async def run_tests(
    request: Request,
    payload: RunTestsRequest,
    orchestrator: TestBatchOrchestrator = Depends(get_orchestrator),
):
    """Same contract as /api/test-execution/run, kept under the exercises path for the editor."""
    return await execute_batch(payload, orchestrator)


@router.get("", response_model=ExerciseListResponse)
async def list_exercises(
    language: Optional[str] = None,
    difficulty: Optional[str] = None,
    limit: int = Query(20, ge=1, le=100),
    page: int = Query(1, ge=1),
    db: AsyncSession = Depends(get_db),
):
    service = ExerciseService(db)
    exercises = await service.list_exercises(
        language=language,
        difficulty=difficulty,
        limit=limit,
        offset=(page - 1) * limit,
    )
    return ExerciseListResponse(data=[ExerciseOut.model_validate(e) for e in exercises])


@router.post("", response_model=ExerciseResponse, status_code=201)
async def create_exercise(payload: ExerciseCreate, db: AsyncSession = Depends(get_db)):
    exercise = await ExerciseService(db).create_exercise(payload)
    return ExerciseResponse(data=ExerciseOut.model_validate(exercise))


@router.get("/{exercise_id}", response_model=ExerciseResponse)
async def get_exercise(exercise_id: int, db: AsyncSession = Depends(get_db)):
    exercise = await ExerciseService(db).get_exercise(exercise_id)
    if not exercise:
        raise ExerciseNotFoundError(exercise_id)
    return ExerciseResponse(data=ExerciseOut.model_validate(exercise))


@router.post("/{exercise_id}/run-tests", response_model=RunTestsResponse)
@limiter.limit(RUN_TESTS_RATE_LIMIT)
async def run_exercise_tests(
    request: Request,
    exercise_id: int,
    payload: ExerciseRunRequest,
    db: AsyncSession = Depends(get_db),
    orchestrator: TestBatchOrchestrator = Depends(get_orchestrator),
):
    """Run a submission against the test cases stored with an exercise."""
    exercise = await ExerciseService(db).get_exercise(exercise_id)
    if not exercise:
        raise ExerciseNotFoundError(exercise_id)

    try:
        test_cases = [TestCase.model_validate(case) for case in exercise.test_cases or []]
    except Exception as e:
        logger.exception("Stored test cases are malformed", extra={"exercise_id": exercise_id})
        return internal_error_response(e)

    batch = RunTestsRequest(
        code=payload.code,
        test_cases=test_cases,
        language=exercise.language,
        function_name=payload.function_name or exercise.function_name,
    )
    return await execute_batch(batch, orchestrator)
