from fastapi import APIRouter, Depends

from lokey.dependencies import get_lokalise
from lokey.lokalise import LokaliseClient

router = APIRouter()


@router.get("/project")
async def project(lokalise: LokaliseClient = Depends(get_lokalise)):
    return {"project": await lokalise.get_project()}


@router.get("/languages")
async def languages(lokalise: LokaliseClient = Depends(get_lokalise)):
    return {"languages": await lokalise.get_languages()}
