"""FastAPI server exposing the Smart Wardrobe endpoints."""

from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from logic.validation import (
    CleanRequest,
    OutfitQuery,
    RecommendationQuery,
    SaveOutfitRequest,
    validation_failure,
)
from models.outfit import ERROR_NOTICE
from tools.wardrobe_store import ItemNotFoundError, WardrobeStoreError
from wardrobe_app.app import SmartWardrobeApp
from wardrobe_app.logging_config import configure_logging

configure_logging()


def get_wardrobe(request: Request) -> SmartWardrobeApp:
    """Build the wardrobe app on first use so importing this module has no side effects."""

    if request.app.state.wardrobe is None:
        request.app.state.wardrobe = SmartWardrobeApp()
    return request.app.state.wardrobe


def user_scope(x_user_id: str = Header(..., alias="X-User-Id", min_length=1)) -> str:
    return x_user_id


def create_app(wardrobe: Optional[SmartWardrobeApp] = None) -> FastAPI:
    api = FastAPI(title="Smart Wardrobe", version="0.1.0")
    api.state.wardrobe = wardrobe

    @api.exception_handler(ItemNotFoundError)
    async def _not_found(_: Request, exc: ItemNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @api.exception_handler(WardrobeStoreError)
    async def _store_failed(_: Request, exc: WardrobeStoreError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": ERROR_NOTICE})

    @api.exception_handler(ValidationError)
    async def _invalid(_: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content=validation_failure("Invalid payload", exc))

    @api.get("/healthz")
    async def healthcheck(wardrobe: SmartWardrobeApp = Depends(get_wardrobe)) -> dict:
        """Lightweight readiness probe."""

        return {
            "status": "ok",
            "service": "smart-wardrobe",
            "environment": wardrobe.config.environment or "local",
            "model": wardrobe.config.model,
            "reasoning_configured": wardrobe.reasoning_client is not None,
        }

    # Wardrobe items

    @api.post("/items", status_code=201)
    async def add_item(
        payload: Dict[str, Any] = Body(...),
        user_id: str = Depends(user_scope),
        wardrobe: SmartWardrobeApp = Depends(get_wardrobe),
    ) -> dict:
        item = await wardrobe.add_item(user_id, payload)
        return item.to_dict()

    @api.get("/items")
    async def list_items(
        category: Optional[str] = None,
        color: Optional[str] = None,
        season: Optional[str] = None,
        occasion: Optional[str] = None,
        in_wash: Optional[bool] = None,
        user_id: str = Depends(user_scope),
        wardrobe: SmartWardrobeApp = Depends(get_wardrobe),
    ) -> dict:
        filters = {"category": category, "color": color, "season": season, "occasion": occasion}
        if any(filters.values()):
            filters["in_wash"] = in_wash
            items = await wardrobe.store.search_items(user_id, filters)
        else:
            items = await wardrobe.list_items(user_id, in_wash=in_wash)
        return {"items": [item.to_dict() for item in items]}

    @api.get("/items/{item_id}")
    async def get_item(
        item_id: str,
        user_id: str = Depends(user_scope),
        wardrobe: SmartWardrobeApp = Depends(get_wardrobe),
    ) -> dict:
        return (await wardrobe.require_item(user_id, item_id)).to_dict()

    @api.delete("/items/{item_id}")
    async def delete_item(
        item_id: str,
        user_id: str = Depends(user_scope),
        wardrobe: SmartWardrobeApp = Depends(get_wardrobe),
    ) -> dict:
        if not await wardrobe.delete_item(user_id, item_id):
            raise HTTPException(status_code=404, detail=f"Item {item_id} not found")
        return {"deleted": item_id}

    # Lifecycle

    @api.post("/items/{item_id}/use")
    async def record_use(
        item_id: str,
        user_id: str = Depends(user_scope),
        wardrobe: SmartWardrobeApp = Depends(get_wardrobe),
    ) -> dict:
        return (await wardrobe.lifecycle.record_use(user_id, item_id)).to_dict()

    @api.post("/items/{item_id}/wash")
    async def send_to_wash(
        item_id: str,
        user_id: str = Depends(user_scope),
        wardrobe: SmartWardrobeApp = Depends(get_wardrobe),
    ) -> dict:
        return (await wardrobe.lifecycle.send_to_wash(user_id, item_id)).to_dict()

    @api.post("/items/{item_id}/clean")
    async def mark_clean(
        item_id: str,
        user_id: str = Depends(user_scope),
        wardrobe: SmartWardrobeApp = Depends(get_wardrobe),
    ) -> dict:
        return (await wardrobe.lifecycle.mark_clean(user_id, item_id)).to_dict()

    @api.get("/wash")
    async def wash_summary(
        user_id: str = Depends(user_scope),
        wardrobe: SmartWardrobeApp = Depends(get_wardrobe),
    ) -> dict:
        return (await wardrobe.lifecycle.wash_summary(user_id)).to_dict()

    @api.post("/wash/clean")
    async def clean_many(
        request: Optional[CleanRequest] = None,
        user_id: str = Depends(user_scope),
        wardrobe: SmartWardrobeApp = Depends(get_wardrobe),
    ) -> dict:
        request = request or CleanRequest()
        cleaned = await wardrobe.lifecycle.mark_clean_many(user_id, request.item_ids)
        return {"cleaned": [item.to_dict() for item in cleaned]}

    # Recommendations

    @api.post("/items/{item_id}/matches")
    async def find_matches(
        item_id: str,
        query: Optional[RecommendationQuery] = None,
        user_id: str = Depends(user_scope),
        wardrobe: SmartWardrobeApp = Depends(get_wardrobe),
    ) -> dict:
        query = query or RecommendationQuery()
        response = await wardrobe.find_matches(user_id, item_id, query.occasion, query.weather)
        return response.to_dict()

    @api.post("/items/{item_id}/outfits")
    async def compose_outfits(
        item_id: str,
        query: Optional[OutfitQuery] = None,
        user_id: str = Depends(user_scope),
        wardrobe: SmartWardrobeApp = Depends(get_wardrobe),
    ) -> dict:
        query = query or OutfitQuery()
        item_ids = [item_id, *query.extra_base_item_ids]
        response = await wardrobe.compose_outfits(user_id, item_ids, query.occasion, query.weather)
        return response.to_dict()

    @api.post("/items/{item_id}/smart-match")
    async def smart_match(
        item_id: str,
        query: Optional[RecommendationQuery] = None,
        user_id: str = Depends(user_scope),
        wardrobe: SmartWardrobeApp = Depends(get_wardrobe),
    ) -> dict:
        query = query or RecommendationQuery()
        report = await wardrobe.smart_match(user_id, item_id, query.occasion, query.weather)
        return report.to_dict()

    # Preferences

    def _preferences_payload(snapshot) -> dict:
        return {"liked": sorted(snapshot.liked), "disliked": sorted(snapshot.disliked)}

    @api.get("/preferences")
    async def get_preferences(
        user_id: str = Depends(user_scope),
        wardrobe: SmartWardrobeApp = Depends(get_wardrobe),
    ) -> dict:
        return _preferences_payload(await wardrobe.preferences.snapshot(user_id))

    @api.post("/preferences/{item_id}/{action}")
    async def update_preference(
        item_id: str,
        action: str,
        user_id: str = Depends(user_scope),
        wardrobe: SmartWardrobeApp = Depends(get_wardrobe),
    ) -> dict:
        handlers = {
            "like": wardrobe.preferences.like,
            "dislike": wardrobe.preferences.dislike,
            "clear": wardrobe.preferences.clear,
        }
        if action not in handlers:
            raise HTTPException(status_code=404, detail=f"Unknown preference action '{action}'")
        await wardrobe.require_item(user_id, item_id)
        return _preferences_payload(await handlers[action](user_id, item_id))

    # Saved outfits

    @api.post("/outfits", status_code=201)
    async def save_outfit(
        request: SaveOutfitRequest,
        user_id: str = Depends(user_scope),
        wardrobe: SmartWardrobeApp = Depends(get_wardrobe),
    ) -> dict:
        outfit = await wardrobe.store.save_outfit(
            user_id, request.name, request.description, request.occasion, request.item_ids
        )
        return outfit.to_dict()

    @api.get("/outfits")
    async def list_outfits(
        user_id: str = Depends(user_scope),
        wardrobe: SmartWardrobeApp = Depends(get_wardrobe),
    ) -> dict:
        return {"outfits": [outfit.to_dict() for outfit in await wardrobe.store.list_outfits(user_id)]}

    return api


app = create_app()


def get_app() -> FastAPI:
    """Expose the FastAPI instance for ASGI servers."""

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:app", host="0.0.0.0", port=int("8080"), reload=False)
