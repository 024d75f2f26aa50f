from fastapi import APIRouter, Depends

from ..deps import get_settings
from ..settings import Settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
	return {"status": "ok"}


@router.get("/info")
def info(app_settings: Settings = Depends(get_settings)):
	return {
		"status": "ok",
		"feature_set": app_settings.feature_set.value,
		"gemini_configured": bool(app_settings.gemini_api_key),
	}
