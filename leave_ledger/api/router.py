from fastapi import APIRouter

from leave_ledger.api.accruals import accrual_trigger_router
from leave_ledger.api.leave import employee_leave_router
from leave_ledger.api.requests import leave_requests_router

api_router = APIRouter()
api_router.include_router(employee_leave_router)
api_router.include_router(leave_requests_router)
api_router.include_router(accrual_trigger_router)
