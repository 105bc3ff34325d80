from fastapi import APIRouter

from workforce.api.balances import adjustment_router, user_balance_router
from workforce.api.benefit_types import benefit_types_router
from workforce.api.leave_requests import leave_requests_router
from workforce.api.policies import router as policies_router
from workforce.api.time_entries import time_entries_router
from workforce.api.timesheets import timesheets_router

api_router = APIRouter()
api_router.include_router(policies_router)
api_router.include_router(timesheets_router)
api_router.include_router(time_entries_router)
api_router.include_router(benefit_types_router)
api_router.include_router(leave_requests_router)
api_router.include_router(user_balance_router)
api_router.include_router(adjustment_router)
