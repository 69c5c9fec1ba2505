from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request

from .config import get_logger
from .games import InvalidBetInput
from .schemas import CurrentSeed, RotateRequest, RotateResponse, VerifyRequest, VerifyResponse
from .seeds import SeedPairManager
from .verify import verify_bet

logger = get_logger(__name__)

router = APIRouter(tags=["provably-fair"])


def get_manager(request: Request) -> SeedPairManager:
    return request.app.state.seed_manager


@router.get("/health")
async def health_check():
    return {"status": "healthy"}


@router.get("/seeds/current", response_model=CurrentSeed, response_model_by_alias=True)
async def current_seed(manager: SeedPairManager = Depends(get_manager)):
    """Published commitment for the active seed pair; never the raw seed."""
    return CurrentSeed(**{k: v for k, v in manager.current().items() if k != "created_at"})


@router.post("/seeds/rotate", response_model=RotateResponse, response_model_by_alias=True)
async def rotate_seed(body: Optional[RotateRequest] = None, manager: SeedPairManager = Depends(get_manager)):
    client_seed = body.client_seed if body else None
    retired, new = manager.rotate_pair(client_seed)
    return RotateResponse(
        revealed_server_seed=retired.server_seed,
        revealed_server_seed_hash=retired.server_seed_hash,
        final_nonce=retired.nonce,
        server_seed_hash=new.server_seed_hash,
        client_seed=new.client_seed,
    )


@router.post("/verify", response_model=VerifyResponse, response_model_by_alias=True)
def verify(body: VerifyRequest):
    try:
        res = verify_bet(
            body.server_seed,
            body.server_seed_hash,
            body.client_seed,
            body.nonce,
            body.game_type,
            body.expected_outcome,
            body.game_params,
        )
    except InvalidBetInput as e:
        logger.info(f"Rejected verification request: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    return VerifyResponse(
        is_valid=res.is_valid,
        server_seed_match=res.server_seed_match,
        outcome_match=res.outcome_match,
        details=res.details,
        computed_outcome=res.computed_outcome,
    )


def create_app(manager: Optional[SeedPairManager] = None) -> FastAPI:
    app = FastAPI(
        title="Fairplay API",
        description="Seed commitments and provably-fair bet verification",
        version="0.1.0",
    )
    app.state.seed_manager = manager or SeedPairManager()
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    from .config import settings
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
