"""Bot configuration management endpoints."""

from fastapi import APIRouter, Query

from gateway.dependencies import BotConfigServiceDep
from gateway.errors import BotNotFoundError
from gateway.models import (
    BotConfigCreate,
    BotConfigEnvelope,
    BotConfigUpdate,
    BotCreated,
    BotDeleted,
    BotPage,
)
from gateway.services.prompts import generate_system_message

router = APIRouter()


@router.post("/create-bot", response_model=BotCreated, status_code=201)
async def create_bot(body: BotConfigCreate, service: BotConfigServiceDep):
    bot = await service.create_bot(body)
    return BotCreated(
        bot_id=bot.bot_id,
        bot_config=bot,
        system_message=generate_system_message(bot),
    )


@router.get("/bots", response_model=BotPage)
async def list_bots(
    service: BotConfigServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    company_name: str | None = Query(None, alias="companyName"),
):
    return await service.list_bots(page=page, limit=limit, company_name=company_name)


@router.get("/bot/{bot_id}", response_model=BotConfigEnvelope)
async def get_bot(bot_id: str, service: BotConfigServiceDep):
    bot = await service.get_bot(bot_id)
    if not bot:
        raise BotNotFoundError()
    return BotConfigEnvelope(bot_config=bot, system_message=generate_system_message(bot))


@router.put("/bot/{bot_id}", response_model=BotConfigEnvelope)
async def update_bot(bot_id: str, body: BotConfigUpdate, service: BotConfigServiceDep):
    bot = await service.update_bot(bot_id, body)
    if not bot:
        raise BotNotFoundError()
    return BotConfigEnvelope(bot_config=bot, system_message=generate_system_message(bot))


@router.delete("/bot/{bot_id}", response_model=BotDeleted)
async def delete_bot(bot_id: str, service: BotConfigServiceDep):
    deleted = await service.soft_delete_bot(bot_id)
    if not deleted:
        raise BotNotFoundError()
    return BotDeleted(message="Bot deleted successfully", bot_id=bot_id)
