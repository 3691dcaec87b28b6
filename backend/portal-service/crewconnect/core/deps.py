from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorCollection

from crewconnect.core.config import Settings, get_settings
from crewconnect.core.db import get_employees_collection
from crewconnect.core.mail import Notifier, build_mailer
from crewconnect.core.security import ApprovalTokenSigner
from crewconnect.services.leave_requests import LeaveRequestService

_notifier: Notifier | None = None


def get_token_signer(settings: Settings = Depends(get_settings)) -> ApprovalTokenSigner:
    return ApprovalTokenSigner.from_settings(settings)


def get_notifier(settings: Settings = Depends(get_settings)) -> Notifier:
    """
    프로세스 전체에서 하나의 Notifier를 공유한다. (SMTP 설정은 시작 시 고정)
    """
    global _notifier
    if _notifier is None:
        _notifier = Notifier(build_mailer(settings))
    return _notifier


async def get_leave_service(
    collection: AsyncIOMotorCollection = Depends(get_employees_collection),
    signer: ApprovalTokenSigner = Depends(get_token_signer),
    settings: Settings = Depends(get_settings),
) -> LeaveRequestService:
    return LeaveRequestService(collection, signer, settings)
