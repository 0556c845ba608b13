"""
Admin HTTP API - runtime level control without signals.

The same control channel as SIGUSR1/SIGUSR2, usable where signals are not
(other platforms, remote operators, containers without a shell).

Endpoints:
    GET  /api/health      - Health check (no auth)
    GET  /api/level       - Current level threshold
    PUT  /api/level       - Set the level threshold
    POST /api/level/up    - Raise the threshold one step
    POST /api/level/down  - Lower the threshold one step
    GET  /api/status      - Sink, rotation and policy details
"""

from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException
from pydantic import BaseModel, Field

from gclog.control.bridge import LevelCommand, LevelControlBridge
from gclog.levels import LogLevel
from gclog.utils.config import GcLogConfig
from gclog.writer import GcLogger

# ========================================================================
# Request/Response Models
# ========================================================================


class SetLevelRequest(BaseModel):
    """Request body for setting the level."""

    level: str = Field(
        ...,
        description="Level name or rank",
        examples=["warning", "debug", "2"],
    )


class LevelResponse(BaseModel):
    """Current level threshold."""

    level: str
    rank: int
    changed: Optional[bool] = None


class LevelCommandResponse(BaseModel):
    """Response after queueing a relative level change."""

    command: str
    message: str


def _is_rank(value: str) -> bool:
    try:
        int(value)
    except ValueError:
        return False
    return True


# ========================================================================
# Authentication
# ========================================================================


def create_bearer_token_dependency(config: GcLogConfig):
    """
    Create a dependency for bearer token authentication.

    Args:
        config: GcLogConfig instance with the admin token

    Returns:
        FastAPI dependency function for token verification
    """

    async def verify_bearer_token(authorization: str = Header(None)) -> bool:
        """
        Verify the admin token from the Authorization header.

        Raises:
            HTTPException: 500 if no token is configured, 401 if the header is
                missing or malformed, 403 if the token is wrong
        """
        api_token = config.admin_token

        if not api_token:
            raise HTTPException(
                status_code=500,
                detail="Admin token not configured. Set GCLOG_ADMIN_TOKEN environment variable.",
            )

        if not authorization or not authorization.startswith("Bearer "):
            raise HTTPException(
                status_code=401,
                detail="Missing or invalid Authorization header. Expected: 'Bearer <token>'",
            )

        token = authorization[7:]  # Remove "Bearer " prefix

        if token != api_token:
            raise HTTPException(status_code=403, detail="Invalid admin token")

        return True

    return verify_bearer_token


# ========================================================================
# App Factory
# ========================================================================


def create_app(service: GcLogger, bridge: LevelControlBridge, config: GcLogConfig) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        service: GcLogger whose level and sink are exposed
        bridge: Control channel that relative level changes are queued on
        config: GcLogConfig instance with the admin token

    Returns:
        FastAPI app instance
    """
    app = FastAPI(
        title="gclog Admin API",
        description="Runtime log level control and rotation status",
        version="0.1.0",
    )

    verify_token = create_bearer_token_dependency(config)

    def current_level(changed: Optional[bool] = None) -> LevelResponse:
        level = service.level
        return LevelResponse(level=str(level), rank=int(level), changed=changed)

    # ========================================================================
    # Endpoints
    # ========================================================================

    @app.get("/api/health")
    async def health_check():
        """
        Health check endpoint (no auth required).

        Example:
            curl -X GET http://localhost:8766/api/health
        """
        return {"status": "healthy", "service": "gclog"}

    @app.get("/api/level", response_model=LevelResponse)
    async def get_level(authorized: bool = Depends(verify_token)):
        """Return the current level threshold."""
        return current_level()

    @app.put("/api/level", response_model=LevelResponse)
    async def set_level(request: SetLevelRequest, authorized: bool = Depends(verify_token)):
        """
        Set the level threshold.

        Levels outside [verbose, error), including integer ranks that name no
        level, are ignored exactly like a direct set_level() call; ``changed``
        tells the caller whether it applied. Unknown names are a 400.

        Example:
            curl -X PUT http://localhost:8766/api/level \\
                 -H "Authorization: Bearer your_token_here" \\
                 -H "Content-Type: application/json" \\
                 -d '{"level": "debug"}'
        """
        try:
            level = LogLevel.parse(request.level)
        except ValueError as e:
            if _is_rank(request.level):
                # Integer ranks with no level are out of range, not malformed
                return current_level(changed=False)
            raise HTTPException(status_code=400, detail=str(e))

        changed = service.set_level(level)
        return current_level(changed=changed)

    @app.post("/api/level/up", response_model=LevelCommandResponse)
    async def level_up(authorized: bool = Depends(verify_token)):
        """Queue a one-step threshold increase (same as SIGUSR1)."""
        bridge.submit_threadsafe(LevelCommand.UP)
        return LevelCommandResponse(command=str(LevelCommand.UP), message="Level change queued")

    @app.post("/api/level/down", response_model=LevelCommandResponse)
    async def level_down(authorized: bool = Depends(verify_token)):
        """Queue a one-step threshold decrease (same as SIGUSR2)."""
        bridge.submit_threadsafe(LevelCommand.DOWN)
        return LevelCommandResponse(command=str(LevelCommand.DOWN), message="Level change queued")

    @app.get("/api/status")
    async def logger_status(authorized: bool = Depends(verify_token)):
        """
        Sink and rotation status.

        Example:
            curl -X GET http://localhost:8766/api/status \\
                 -H "Authorization: Bearer your_token_here"
        """
        return {"status": "running", **service.status()}

    return app
