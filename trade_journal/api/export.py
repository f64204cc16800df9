from fastapi import APIRouter, Body, Depends, Header, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from trade_journal.api.analytics import build_context
from trade_journal.config import Settings
from trade_journal.dependencies import get_db_session, get_settings, get_settings_store
from trade_journal.models.schemas import AnalyticsRequest, RestoreResponse
from trade_journal.services.export import BackupFormatError, export_csv, export_json, parse_backup
from trade_journal.services.settings_store import SettingsStore

router = APIRouter(prefix="/api/v1/export", tags=["export"])


@router.post("/json")
async def export_backup(
    request: AnalyticsRequest,
    x_api_key: str = Header(...),
    settings: Settings = Depends(get_settings),
    db_session=Depends(get_db_session),
    store: SettingsStore = Depends(get_settings_store),
):
    if x_api_key != settings.api_secret_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

    ctx = await build_context(request, store, db_session)
    return export_json(ctx.trades, ctx.journal_entries)


@router.post("/csv", response_class=PlainTextResponse)
async def export_trades_csv(
    request: AnalyticsRequest,
    x_api_key: str = Header(...),
    settings: Settings = Depends(get_settings),
    db_session=Depends(get_db_session),
    store: SettingsStore = Depends(get_settings_store),
):
    if x_api_key != settings.api_secret_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

    ctx = await build_context(request, store, db_session)
    return PlainTextResponse(export_csv(ctx.trades), media_type="text/csv")


@router.post("/restore", response_model=RestoreResponse)
async def restore_backup(
    payload: dict = Body(...),
    x_api_key: str = Header(...),
    settings: Settings = Depends(get_settings),
):
    if x_api_key != settings.api_secret_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

    try:
        trades, journal_entries = parse_backup(payload)
    except BackupFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    return RestoreResponse(
        trades=[t.model_dump(mode="json") for t in trades],
        journal_entries=[e.model_dump(mode="json") for e in journal_entries],
        trade_count=len(trades),
        journal_entry_count=len(journal_entries),
    )
