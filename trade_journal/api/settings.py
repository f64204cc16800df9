from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import ValidationError

from trade_journal.config import Settings
from trade_journal.dependencies import get_db_session, get_settings, get_settings_store
from trade_journal.models.schemas import SettingsResponse, SettingsUpdateRequest
from trade_journal.services.settings_migrations import JournalSettings
from trade_journal.services.settings_store import SettingsStore

router = APIRouter(prefix="/api/v1/settings", tags=["settings"])


@router.get("", response_model=SettingsResponse)
async def get_journal_settings(
    x_api_key: str = Header(...),
    settings: Settings = Depends(get_settings),
    db_session=Depends(get_db_session),
    store: SettingsStore = Depends(get_settings_store),
):
    if x_api_key != settings.api_secret_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

    journal_settings = await store.load(db_session)
    return SettingsResponse(**journal_settings.model_dump())


@router.put("", response_model=SettingsResponse)
async def update_journal_settings(
    request: SettingsUpdateRequest,
    x_api_key: str = Header(...),
    settings: Settings = Depends(get_settings),
    db_session=Depends(get_db_session),
    store: SettingsStore = Depends(get_settings_store),
):
    if x_api_key != settings.api_secret_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

    current = await store.load(db_session)
    try:
        updated = JournalSettings.model_validate(
            {**current.model_dump(), **request.model_dump(exclude_none=True)}
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    saved = await store.save(db_session, updated)
    return SettingsResponse(**saved.model_dump())
