"""
api/routes/v1/members.py -- The protected sample endpoint.

Exists to prove the token pipeline end to end: a request only gets here with
a token that decodes, has not expired, has not been revoked, and still maps
to an account.
"""

from fastapi import APIRouter, Depends

from api.models import AccountResponse, MemberDataResponse
from auth.dependencies import get_current_account
from auth.models import Account

# Auth policy:
# - GET /api/v1/member-data: requires auth
router = APIRouter()


@router.get("/member-data", response_model=MemberDataResponse)
def member_data(current_account: Account = Depends(get_current_account)) -> MemberDataResponse:
    return MemberDataResponse(
        message="If you see this, you're in!",
        account=AccountResponse.from_account(current_account),
    )
