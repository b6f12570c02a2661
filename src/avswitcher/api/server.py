"""REST API for the AV control service.

Translates HTTP requests into switcher and VIA commands. Path flags use
true/false spellings; welcome=true dials a fresh connection and reads
the device's welcome banner, welcome=false reuses a pooled connection.

Video switcher endpoints (ports are 0-based):

    PUT /switch/{input}/{output}/{address}/{welcome}
                                  -> {"input": "<in>:<out>", "output": "<out>"}
    GET /input/{address}/{port}/{welcome}
                                  -> {"input": "<in>:<port>"}
    PUT /frontlock/{address}/{lock}/{welcome}
                                  -> "Success"
    GET /signal/{address}/{port}  -> {"port": "<port>", "signal": "<payload>"}

VIA endpoints:

    GET /via/{address}/connected  -> {"connected": true}
    GET /via/{address}/volume     -> {"volume": 40}
    GET /via/{address}/hardware   -> HardwareInfo
    GET /via/{address}/users      -> ViaUsers

Errors are returned as a JSON string: 400 for invalid arguments, 500 for
transport and protocol failures.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from avswitcher.channel.channel import CommandChannel
from avswitcher.channel.indexing import parse_bool
from avswitcher.config.settings import Settings
from avswitcher.devices.via import ViaClient
from avswitcher.devices.videoswitcher import VideoSwitcher
from avswitcher.domain.models import (
    ChannelMode,
    HardwareInfo,
    InputRoute,
    SignalStatus,
    ViaUsers,
)
from avswitcher.errors import InvalidArgumentError, SwitcherError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: str = "ok"
    open_connections: int = 0


class ConnectedResponse(BaseModel):
    connected: bool


class VolumeResponse(BaseModel):
    volume: int


def _mode_for(welcome: bool) -> ChannelMode:
    return ChannelMode.TRANSIENT if welcome else ChannelMode.POOLED


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def create_app(
    settings: Settings | None = None,
    switcher: VideoSwitcher | None = None,
    via: ViaClient | None = None,
) -> FastAPI:
    """Create the control service application.

    Args:
        settings: Service settings; defaults are used when omitted.
        switcher: Optional pre-configured VideoSwitcher (for testing).
        via: Optional pre-configured ViaClient (for testing).
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        channels: list[CommandChannel] = []
        if app.state.switcher is None:
            channel = CommandChannel.from_config(settings.channel)
            channels.append(channel)
            app.state.switcher = VideoSwitcher(channel)
        if app.state.via is None:
            via_channel = CommandChannel.from_config(settings.channel, port=settings.via.port)
            channels.append(via_channel)
            app.state.via = ViaClient(
                via_channel,
                mode=ChannelMode.POOLED if settings.via.pooled else ChannelMode.TRANSIENT,
                read_welcome=settings.via.read_welcome,
            )
        for channel in channels:
            channel.start()
        app.state.channels = channels
        logger.info("Control service started")

        yield

        for channel in channels:
            await channel.close()
        logger.info("Control service stopped")

    app = FastAPI(
        title="avswitcher",
        description="HTTP control for matrix video switchers and VIA endpoints",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.switcher = switcher
    app.state.via = via
    app.state.channels = []

    @app.exception_handler(InvalidArgumentError)
    async def invalid_argument_handler(request: Request, exc: InvalidArgumentError) -> JSONResponse:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=400, content=str(exc))

    @app.exception_handler(SwitcherError)
    async def switcher_error_handler(request: Request, exc: SwitcherError) -> JSONResponse:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content=str(exc))

    @app.get("/health")
    async def health_check() -> HealthResponse:
        channels: list[CommandChannel] = app.state.channels
        return HealthResponse(
            status="ok",
            open_connections=sum(len(c.pool) for c in channels),
        )

    # -------------------------------------------------------------------
    # Video switcher endpoints
    # -------------------------------------------------------------------

    @app.put("/switch/{input}/{output}/{address}/{welcome}", response_model_exclude_none=True)
    async def switch_input(input: str, output: str, address: str, welcome: str) -> InputRoute:
        read_welcome = parse_bool(welcome, "welcome")
        s: VideoSwitcher = app.state.switcher
        return await s.switch_input(
            address, input, output, _mode_for(read_welcome), read_welcome
        )

    @app.get("/input/{address}/{port}/{welcome}", response_model_exclude_none=True)
    async def get_input_by_port(address: str, port: str, welcome: str) -> InputRoute:
        read_welcome = parse_bool(welcome, "welcome")
        s: VideoSwitcher = app.state.switcher
        return await s.get_current_input_by_output_port(
            address, port, _mode_for(read_welcome), read_welcome
        )

    @app.put("/frontlock/{address}/{lock}/{welcome}")
    async def set_front_lock(address: str, lock: str, welcome: str) -> str:
        locked = parse_bool(lock, "front-button-lock")
        read_welcome = parse_bool(welcome, "welcome")
        s: VideoSwitcher = app.state.switcher
        await s.set_front_lock(address, locked, _mode_for(read_welcome), read_welcome)
        return "Success"

    @app.get("/signal/{address}/{port}")
    async def get_active_signal(address: str, port: str) -> SignalStatus:
        s: VideoSwitcher = app.state.switcher
        return await s.get_active_signal_by_port(
            address, port, ChannelMode.TRANSIENT, read_welcome=True
        )

    # -------------------------------------------------------------------
    # VIA endpoints
    # -------------------------------------------------------------------

    @app.get("/via/{address}/connected")
    async def via_connected(address: str) -> ConnectedResponse:
        v: ViaClient = app.state.via
        return ConnectedResponse(connected=await v.is_connected(address))

    @app.get("/via/{address}/volume")
    async def via_volume(address: str) -> VolumeResponse:
        v: ViaClient = app.state.via
        return VolumeResponse(volume=await v.get_volume(address))

    @app.get("/via/{address}/hardware")
    async def via_hardware(address: str) -> HardwareInfo:
        v: ViaClient = app.state.via
        return await v.get_hardware_info(address)

    @app.get("/via/{address}/users")
    async def via_users(address: str) -> ViaUsers:
        v: ViaClient = app.state.via
        return await v.get_status_of_users(address)

    return app


# ---------------------------------------------------------------------------
# Standalone entry point
# ---------------------------------------------------------------------------

def main(settings: Settings | None = None) -> None:
    """Run the control service."""
    settings = settings or Settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.server.host, port=settings.server.port)


if __name__ == "__main__":
    main()
