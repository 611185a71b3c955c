from fastapi import APIRouter

from app.api.deps import ImageServiceDep
from app.api.v1.schemas import SelectionRead, TokenMetadataRead, TraitCatalogRead
from app.core.settings import settings
from app.services.traits import coerce_identifier


router = APIRouter(tags=["traits"])


@router.get("/traits", response_model=TraitCatalogRead)
def list_traits(service=ImageServiceDep):
    config = service.config
    return TraitCatalogRead(
        version=config.version,
        order=config.order,
        categories={category: [o.id for o in config.table(category)] for category in config.order},
    )


@router.get("/traits/{fid}", response_model=SelectionRead)
def get_selection(fid: str, service=ImageServiceDep):
    resolved = coerce_identifier(fid)
    return SelectionRead(fid=resolved, traits=service.select(resolved).ids())


@router.get("/metadata/{fid}", response_model=TokenMetadataRead)
def get_metadata(fid: str, service=ImageServiceDep):
    resolved = coerce_identifier(fid)
    return service.token_metadata(resolved, settings.base_url, settings.app_name)
