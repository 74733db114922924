from fastapi import APIRouter

from .app_proxy.route import router as proxy_router
from .search.route import router as search_router
from .render.route import router as render_router

router = APIRouter()


@router.get("/health")
async def health():
    return {"ok": True}


router.include_router(proxy_router)
router.include_router(search_router)
router.include_router(render_router)
