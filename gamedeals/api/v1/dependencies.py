from fastapi import HTTPException, Request

from gamedeals.services.catalog import Catalog


def get_catalog(request: Request) -> Catalog:
    """
    Dependency that hands out the catalog owned by the running app.
    """
    return request.app.state.catalog


def get_ready_catalog(request: Request) -> Catalog:
    """
    Same as get_catalog, but refuses to serve before the first snapshot has loaded.
    """
    catalog = get_catalog(request)
    if not catalog.is_ready:
        raise HTTPException(status_code=503, detail=f"Catalog is {catalog.state.value}")
    return catalog
