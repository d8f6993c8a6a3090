"""FastAPI Dependencies

Centralized dependency injection for reuse across all route modules.
"""

from fastapi import Request

from tally.store import TallyStore


def get_store(request: Request) -> TallyStore:
    """Dependency to get the tally store from app state

    Usage in routes:
        @router.get("/endpoint")
        async def endpoint(store: TallyStore = Depends(get_store)):
            return store.query_tally().to_dict()

    The store is created in the app lifespan, so tests get a fresh
    store every time a TestClient enters the app.
    """
    return request.app.state.store
