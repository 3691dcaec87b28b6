"""
결재 링크용 서명 토큰.

승인/반려 메일 링크에 들어가는 JWT를 발급하고 검증한다. 토큰은
{employeeId, requestIndex, requestId, action}을 담고 있고 만료 시각(exp)이 있다.
로그인 세션 없이 링크만으로 상태를 바꾸므로 서명/만료/대상 일치를 모두 확인해야 한다.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from crewconnect.core.config import Settings
from crewconnect.core.errors import TokenExpired, TokenInvalid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApprovalClaims:
    employee_id: str
    request_index: int
    request_id: str
    action: str
    expires_at: datetime


class ApprovalTokenSigner:
    def __init__(
        self,
        secret: str,
        ttl: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
    ) -> None:
        self._secret = secret
        self._ttl = ttl
        self._algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: Settings) -> "ApprovalTokenSigner":
        return cls(
            secret=settings.JWT_SECRET,
            ttl=timedelta(days=settings.APPROVAL_TOKEN_TTL_DAYS),
            algorithm=settings.JWT_ALGORITHM,
        )

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(
        self,
        employee_id: str,
        request_index: int,
        request_id: str,
        action: str,
        now: datetime | None = None,
        ttl: timedelta | None = None,
    ) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "employeeId": employee_id,
            "requestIndex": request_index,
            "requestId": request_id,
            "action": action,
            "iat": issued_at,
            "exp": issued_at + (self._ttl if ttl is None else ttl),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> ApprovalClaims:
        """
        서명과 만료를 검증하고 claim을 돌려준다.

        - 만료: TokenExpired
        - 서명 불일치, 형식 오류, claim 누락: TokenInvalid
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as exc:
            logger.warning("Approval token expired")
            raise TokenExpired() from exc
        except jwt.InvalidTokenError as exc:
            logger.warning("Approval token rejected: %s", exc.__class__.__name__)
            raise TokenInvalid() from exc

        employee_id = payload.get("employeeId")
        request_index = payload.get("requestIndex")
        request_id = payload.get("requestId")
        action = payload.get("action")
        if (
            not isinstance(employee_id, str)
            or not isinstance(request_index, int)
            or isinstance(request_index, bool)
            or not isinstance(request_id, str)
            or not isinstance(action, str)
        ):
            logger.warning("Approval token is missing required claims")
            raise TokenInvalid()

        return ApprovalClaims(
            employee_id=employee_id,
            request_index=request_index,
            request_id=request_id,
            action=action,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
