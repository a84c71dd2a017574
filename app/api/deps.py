"""API dependencies — database session and write-endpoint authentication.

Reads are public. Endpoints that create, modify or delete listings require the
``X-API-Key`` header, configured through ``API_KEY`` in the environment:

    API_KEY=some-long-random-secret

User accounts and sessions are handled outside this service.
"""
import secrets
from typing import Any, AsyncGenerator, Annotated, Dict, Optional

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import async_session_factory


# ---------------------------------------------------------------------------
# Database session dependency
# ---------------------------------------------------------------------------

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session for request scope."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ---------------------------------------------------------------------------
# API Key authentication
# ---------------------------------------------------------------------------

_api_key_header = APIKeyHeader(
    name="X-API-Key",
    auto_error=False,  # return our own 401 instead of FastAPI's 403
    description="API key for write endpoints. Configured via API_KEY.",
)


async def verify_api_key(
    api_key: Annotated[Optional[str], Security(_api_key_header)],
) -> str:
    """Validate the X-API-Key header with a constant-time comparison.

    Raises:
        HTTPException 401: key missing or wrong.
        HTTPException 500: API_KEY is not configured on the server.
    """
    if not settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server misconfigured (API_KEY missing).",
        )

    if not api_key or not secrets.compare_digest(api_key, settings.api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key. Use the X-API-Key header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return api_key


RequireApiKey = Depends(verify_api_key)


# ---------------------------------------------------------------------------
# Raw filter input
# ---------------------------------------------------------------------------

def query_params_to_raw(request: Request) -> Dict[str, Any]:
    """Flatten query parameters into a raw filter mapping; repeated keys become lists."""
    raw: Dict[str, Any] = {}
    for key in request.query_params.keys():
        values = request.query_params.getlist(key)
        raw[key] = values if len(values) > 1 else values[0]
    return raw
