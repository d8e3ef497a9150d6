import httpx
import logging
from typing import Protocol

from anonqa.errors import DependencyFailed

logger = logging.getLogger(__name__)


class EmailTransport(Protocol):
    async def send(self, to: str, subject: str, html: str) -> None:
        """寄送單一郵件，失敗時拋出例外"""
        ...


class ResendTransport:
    """透過 HTTP 郵件 API (Resend 相容) 寄送郵件"""

    def __init__(self, api_url: str, api_key: str, sender: str, timeout: float = 15.0):
        self.api_url = api_url
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout

    async def send(self, to: str, subject: str, html: str) -> None:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}"
        }
        payload = {
            "from": self.sender,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(f"郵件 API 回應錯誤: {e.response.status_code}")
                raise DependencyFailed(detail=f"郵件 API 回應錯誤: {e.response.status_code}") from e
            except httpx.RequestError as e:
                logger.error(f"郵件 API 連線失敗: {e}")
                raise DependencyFailed(detail="郵件 API 連線失敗") from e
