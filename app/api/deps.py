from functools import lru_cache

from fastapi import Depends

from app.config.loaders import fragments_dir, load_trait_config_v1
from app.core.settings import settings
from app.services.fragments import FragmentStore
from app.services.images import ImageService
from app.services.minted import MintRegistry


@lru_cache(maxsize=1)
def get_fragment_store() -> FragmentStore:
    return FragmentStore.from_directory(fragments_dir())


def image_service() -> ImageService:
    return ImageService(load_trait_config_v1(), get_fragment_store())


@lru_cache(maxsize=1)
def get_mint_registry(path: str) -> MintRegistry:
    return MintRegistry(path)


def mint_registry() -> MintRegistry:
    # Cached per path; the lock only serializes callers sharing an instance.
    return get_mint_registry(str(settings.minted_file))


ImageServiceDep = Depends(image_service)
MintRegistryDep = Depends(mint_registry)
