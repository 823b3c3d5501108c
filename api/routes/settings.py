"""
Settings Routes
===============

Read and update model configuration, index schema, example corpus and
the debug flag.
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from api.schemas import (
    DebugFlagModel,
    ErrorResponse,
    LLMConfigModel,
    SampleQueryModel,
    SchemaModel,
)
from nl_to_es.exceptions import ConfigurationError
from nl_to_es.llm.providers import get_provider
from nl_to_es.models import LLMConfig, SampleQuery
from nl_to_es.settings import SettingsStore
from observability.logging_config import get_logger

router = APIRouter(prefix="/api/v1/settings", tags=["Settings"])

logger = get_logger(__name__)


def get_settings_store(request: Request) -> SettingsStore:
    """Dependency to get the agent's settings store."""
    return request.app.state.agent.settings


@router.get("/llm", response_model=LLMConfigModel, response_model_by_alias=True)
async def read_llm_config(
    request: Request, store: SettingsStore = Depends(get_settings_store)
) -> LLMConfigModel:
    """Return the effective model settings. The API key is never echoed."""
    config = await store.get_config() or request.app.state.agent.default_config
    return LLMConfigModel.model_validate(config.to_dict(include_secrets=False))


@router.put(
    "/llm",
    response_model=LLMConfigModel,
    response_model_by_alias=True,
    responses={400: {"model": ErrorResponse, "description": "Unsupported provider"}},
)
async def update_llm_config(body: LLMConfigModel, request: Request) -> LLMConfigModel:
    try:
        get_provider(body.provider)
    except ConfigurationError as e:
        raise HTTPException(
            status_code=400,
            detail=ErrorResponse(error="ConfigurationError", message=str(e)).model_dump(),
        )

    config = LLMConfig.from_dict(body.model_dump(by_alias=True))
    await request.app.state.agent.update_config(config)
    return LLMConfigModel.model_validate(config.to_dict(include_secrets=False))


@router.get("/schema", response_model=SchemaModel, response_model_by_alias=True)
async def read_schema(store: SettingsStore = Depends(get_settings_store)) -> SchemaModel:
    return SchemaModel.model_validate(await store.get_schema())


@router.put("/schema", response_model=SchemaModel, response_model_by_alias=True)
async def update_schema(
    body: SchemaModel, store: SettingsStore = Depends(get_settings_store)
) -> SchemaModel:
    await store.set_schema(body.model_dump(by_alias=True))
    logger.info("Schema updated", index=body.index_name, fields=len(body.mappings.get("properties", {})))
    return body


@router.get("/examples", response_model=list[SampleQueryModel], response_model_by_alias=True)
async def read_examples(
    store: SettingsStore = Depends(get_settings_store),
) -> list[SampleQueryModel]:
    samples = await store.get_example_corpus()
    return [SampleQueryModel.model_validate(s.to_dict()) for s in samples]


@router.put("/examples", response_model=list[SampleQueryModel], response_model_by_alias=True)
async def update_examples(
    body: list[SampleQueryModel], store: SettingsStore = Depends(get_settings_store)
) -> list[SampleQueryModel]:
    samples = [SampleQuery.from_dict(item.model_dump(by_alias=True)) for item in body]
    await store.set_example_corpus(samples)
    logger.info("Example corpus updated", count=len(samples))
    return body


@router.get("/debug", response_model=DebugFlagModel)
async def read_debug(store: SettingsStore = Depends(get_settings_store)) -> DebugFlagModel:
    return DebugFlagModel(enabled=await store.get_debug())


@router.put("/debug", response_model=DebugFlagModel)
async def update_debug(body: DebugFlagModel, request: Request) -> DebugFlagModel:
    await request.app.state.agent.set_debug(body.enabled)
    return body
