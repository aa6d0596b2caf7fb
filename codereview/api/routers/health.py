from fastapi import APIRouter

from codereview.schemas import ApiResponse, ok

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=ApiResponse[dict])
async def health() -> ApiResponse:
    return ok({"status": "ok"}, "Server is running")
