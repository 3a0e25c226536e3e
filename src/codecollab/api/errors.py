"""Exception handler — domain errors to HTTP responses.

Learn: Services raise CodeCollabError subclasses; this one handler turns
any of them into ``{"detail": ..., "code": ...}`` with the error's status.
401s also get a WWW-Authenticate header, matching what clients expect from
a bearer-token API.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from codecollab.errors import CodeCollabError, ConsistencyGap

logger = structlog.get_logger()


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(CodeCollabError)
    async def codecollab_error_handler(request: Request, exc: CodeCollabError):
        headers = None
        if exc.http_status == 401:
            headers = {"WWW-Authenticate": "Bearer"}

        # Consistency gaps are already logged where they happen
        if not isinstance(exc, ConsistencyGap):
            logger.info(
                "request.rejected",
                code=exc.code,
                status=exc.http_status,
                path=request.url.path,
            )
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_response(),
            headers=headers,
        )
