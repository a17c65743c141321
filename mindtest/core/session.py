"""Anonymous visitor session cookie.

Every request leaves this middleware with ``request.state.session_id`` set. A
well-formed cookie is passed through unchanged; otherwise a fresh token is
minted and sent back with a bounded ``Max-Age``. Nothing is stored server side.
"""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from mindtest.core.security import generate_session_token, is_valid_session_token


class SessionCookieMiddleware(BaseHTTPMiddleware):
    """Ensure each visitor carries a ``session_id`` cookie."""

    def __init__(
        self,
        app: ASGIApp,
        cookie_name: str = "session_id",
        max_age_days: int = 10,
        secure: bool = False,
        samesite: str = "lax",
    ) -> None:
        super().__init__(app)
        self.cookie_name = cookie_name
        self.max_age = max_age_days * 24 * 3600
        self.secure = secure
        self.samesite = samesite

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        presented = request.cookies.get(self.cookie_name)
        is_new = not is_valid_session_token(presented)
        session_id = generate_session_token() if is_new else presented

        request.state.session_id = session_id
        request.state.session_is_new = is_new

        response = await call_next(request)

        # Only set if missing or malformed
        if is_new:
            response.set_cookie(
                self.cookie_name,
                session_id,
                max_age=self.max_age,
                httponly=True,
                secure=self.secure,
                samesite=self.samesite,  # type: ignore[arg-type]
                path="/",
            )
        return response
