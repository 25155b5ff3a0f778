"""
Dietwise — Main API Router

Aggregates all sub-routers under a single prefix so that ``dietwise.main``
can mount the entire API surface with one ``include_router`` call.
"""

from fastapi import APIRouter

from dietwise.api import advisory, participants, responses, surveys

router = APIRouter()

router.include_router(participants.router, prefix="/participants", tags=["Participants"])
router.include_router(surveys.router, prefix="/surveys", tags=["Surveys"])
router.include_router(responses.router, prefix="/responses", tags=["Responses"])
router.include_router(responses.form_router, prefix="/survey", tags=["Survey Form"])
router.include_router(advisory.router, prefix="/advisory", tags=["Advisory"])
