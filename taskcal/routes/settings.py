from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from taskcal.routes.auth import require_api_key_if_configured
from taskcal.settings.theme import get_theme, set_theme, toggle_theme


router = APIRouter(dependencies=[Depends(require_api_key_if_configured)])


class ThemeUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_dark: bool = Field(alias="isDark")


@router.get("/theme")
async def read_theme() -> JSONResponse:
    return JSONResponse(status_code=200, content={"isDark": get_theme()})


@router.put("/theme")
async def update_theme(body: ThemeUpdate) -> JSONResponse:
    return JSONResponse(status_code=200, content={"isDark": set_theme(body.is_dark)})


@router.post("/theme/toggle")
async def toggle_theme_route() -> JSONResponse:
    return JSONResponse(status_code=200, content={"isDark": toggle_theme()})
