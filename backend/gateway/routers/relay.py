"""Chat relay endpoint."""

from fastapi import APIRouter, Request, Response

from gateway.dependencies import AllowedOriginBotDep, ChatRelayServiceDep, GuardedBotDep
from gateway.errors import MissingParameterError
from gateway.models import AskRequest, AskResponse
from gateway.services.origin_gate import cors_headers

RELAY_PATH = "/ask-gemini"

router = APIRouter()


@router.options(RELAY_PATH, status_code=204)
async def ask_gemini_preflight(request: Request, bot_config: AllowedOriginBotDep):
    return Response(status_code=204, headers=cors_headers(request.headers["origin"]))


@router.post(RELAY_PATH, response_model=AskResponse)
async def ask_gemini(
    body: AskRequest,
    bot_config: GuardedBotDep,
    service: ChatRelayServiceDep,
):
    if not body.prompt or not body.bot_id:
        raise MissingParameterError("prompt and botId are required")
    response = await service.ask(bot_config, body.prompt, body.history)
    return AskResponse(response=response)
