"""
Dependency injection for FastAPI routes.

Besides typed service dependencies, this module holds the relay guard
chain. Each stage depends on the previous one, so they always run as
origin gate, then network limiter, then bot limiter.
"""

import json
from typing import Annotated
from fastapi import Request, Response, Depends

from gateway.config import settings
from gateway.models import BotConfig
from gateway.services.bot_config import BotConfigService
from gateway.services.chat_relay import ChatRelayService
from gateway.services.origin_gate import OriginGate, cors_headers


def get_bot_config_service(request: Request) -> BotConfigService:
    return request.app.state.bot_config_service


def get_origin_gate(request: Request) -> OriginGate:
    return request.app.state.origin_gate


def get_chat_relay_service(request: Request) -> ChatRelayService:
    return request.app.state.chat_relay_service


BotConfigServiceDep = Annotated[BotConfigService, Depends(get_bot_config_service)]
OriginGateDep = Annotated[OriginGate, Depends(get_origin_gate)]
ChatRelayServiceDep = Annotated[ChatRelayService, Depends(get_chat_relay_service)]


def client_address(request: Request) -> str:
    if settings.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


async def request_bot_id(request: Request) -> str | None:
    body = await request.body()
    if body:
        try:
            payload = json.loads(body)
        except ValueError:
            payload = None
        if isinstance(payload, dict) and payload.get("botId"):
            return str(payload["botId"])
    return request.query_params.get("botId")


async def require_allowed_origin(
    request: Request,
    response: Response,
    gate: OriginGateDep,
) -> BotConfig:
    origin = request.headers.get("origin")
    bot_config = await gate.resolve(origin, await request_bot_id(request))
    headers = cors_headers(origin)
    response.headers.update(headers)
    request.state.cors_headers = headers
    request.state.bot_config = bot_config
    return bot_config


async def enforce_ip_rate_limit(
    request: Request,
    bot_config: Annotated[BotConfig, Depends(require_allowed_origin)],
) -> BotConfig:
    await request.app.state.ip_rate_limiter.check(client_address(request))
    return bot_config


async def enforce_bot_rate_limit(
    request: Request,
    bot_config: Annotated[BotConfig, Depends(enforce_ip_rate_limit)],
) -> BotConfig:
    await request.app.state.bot_rate_limiter.check(bot_config.bot_id or client_address(request))
    return bot_config


AllowedOriginBotDep = Annotated[BotConfig, Depends(require_allowed_origin)]
GuardedBotDep = Annotated[BotConfig, Depends(enforce_bot_rate_limit)]
