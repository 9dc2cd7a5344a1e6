"""FastAPI endpoints for the key-value settings store."""

import json
from typing import Any

from fastapi import APIRouter, Body
from protean.utils.globals import current_domain

from storefront.settings.store import SaveSetting, get_setting

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("/{key}")
async def read_setting(key: str):
    return {"success": True, "data": get_setting(key)}


@router.put("/{key}")
async def save_setting(key: str, value: Any = Body(...)):
    current_domain.process(SaveSetting(key=key, value=json.dumps(value)), asynchronous=False)
    return {"success": True, "data": get_setting(key)}
