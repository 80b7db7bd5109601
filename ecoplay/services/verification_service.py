"""
Verification Oracle for submitted photo evidence.

The oracle only answers accept/reject. Image analysis itself is external:
- simulated mode answers with VERIFICATION_SIMULATED_RESULT
- remote mode asks an HTTP service and fails closed on any problem
"""
from typing import Any, Dict, Optional
import asyncio
import logging
import httpx

from ecoplay.config import settings

logger = logging.getLogger(__name__)


class VerificationService:
    """Pluggable accept/reject decision for evidence."""

    @staticmethod
    async def verify(evidence: Optional[str], kind: str) -> bool:
        """
        Return True if the evidence is accepted.

        Timeouts, transport errors, non-2xx responses and malformed bodies
        count as rejections. The call is never retried.
        """
        if not evidence:
            logger.info(f"Rejecting empty {kind} evidence")
            return False

        if settings.VERIFICATION_MODE == "remote":
            # httpx timeouts are per phase; bound the whole call as well
            try:
                return await asyncio.wait_for(
                    VerificationService._verify_remote(evidence, kind),
                    timeout=settings.VERIFICATION_TIMEOUT_SECONDS,
                )
            except asyncio.TimeoutError:
                logger.warning(f"Verification oracle exceeded {settings.VERIFICATION_TIMEOUT_SECONDS}s for {kind}")
                return False

        return bool(settings.VERIFICATION_SIMULATED_RESULT)

    @staticmethod
    async def _verify_remote(evidence: str, kind: str) -> bool:
        if not settings.VERIFICATION_API_URL:
            logger.error("VERIFICATION_MODE=remote but VERIFICATION_API_URL is not set")
            return False

        headers: Dict[str, str] = {}
        if settings.VERIFICATION_API_KEY:
            headers["Authorization"] = f"Bearer {settings.VERIFICATION_API_KEY}"

        try:
            async with httpx.AsyncClient(timeout=settings.VERIFICATION_TIMEOUT_SECONDS) as client:
                response = await client.post(
                    settings.VERIFICATION_API_URL,
                    json={"evidence": evidence, "kind": kind},
                    headers=headers,
                )

            if response.status_code != 200:
                logger.warning(f"Verification oracle returned {response.status_code} for {kind}")
                return False

            body: Any = response.json()
            return isinstance(body, dict) and body.get("verified") is True

        except httpx.TimeoutException:
            logger.warning(f"Verification oracle timeout for {kind}")
            return False
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Verification oracle error for {kind}: {e}")
            return False
