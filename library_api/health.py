from fastapi import APIRouter

from .config import get_settings

router = APIRouter()


@router.get("/healthz")
def healthz() -> dict[str, bool]:
    return {"ok": True}


@router.get("/readyz")
def readyz() -> dict[str, bool]:
    # Search stays available without a provider key, in lexical mode only
    settings = get_settings()
    return {"ready": True, "semantic_search": bool(settings.openai_api_key)}
