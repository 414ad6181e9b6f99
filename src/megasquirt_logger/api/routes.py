"""API route handlers."""

from fastapi import APIRouter, Depends, HTTPException

from megasquirt_logger.api.dependencies import get_cache, get_decoder, get_schema
from megasquirt_logger.core.cache import RecordCache
from megasquirt_logger.core.models import ChannelsResponse, DatalogResponse, RecordResponse
from megasquirt_logger.schema.decoder import RecordDecoder
from megasquirt_logger.schema.loader import SchemaSource

router = APIRouter(prefix="/api")


@router.get("/record", response_model=RecordResponse)
async def get_record(cache: RecordCache = Depends(get_cache)):
    """Get the most recently decoded record."""
    snapshot = await cache.get()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="No record received yet")

    return RecordResponse(
        timestamp=snapshot.timestamp,
        values={name: {"value": v.value, "unit": v.unit} for name, v in snapshot.values.items()},
        errors=snapshot.errors,
    )


@router.get("/channels", response_model=ChannelsResponse)
async def get_channels(decoder: RecordDecoder = Depends(get_decoder)):
    """List the compiled output channels."""
    channels = {name: channel.model_dump() for name, channel in decoder.channels.items()}
    return ChannelsResponse(count=len(channels), channels=channels)


@router.get("/datalog", response_model=DatalogResponse)
async def get_datalog(schema: SchemaSource = Depends(get_schema)):
    """List the datalog entries declared by the schema."""
    return DatalogResponse(entries=schema.datalog_entries)
