# ╔══════════════════════════════════════════════════════════════════════════╗
# ║ SubHub SL · Site assistant                                                ║
# ║  - POST /api/chat {message, history} → {reply} | {error}                  ║
# ║ Rate limited at the sensitive tier by `RateLimitMiddleware`.              ║
# ╚══════════════════════════════════════════════════════════════════════════╝
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from subhub.api.deps import get_chat_service
from subhub.services.chat_service import NOT_CONFIGURED, ChatRequest, ChatService

router = APIRouter(prefix="/api/chat", tags=["Chat"])


@router.post("")
async def chat(payload: ChatRequest, service: ChatService = Depends(get_chat_service)) -> JSONResponse:
    result = await service.reply(payload)
    if result.success:
        return JSONResponse(result.as_dict())
    status_code = 503 if result.error == NOT_CONFIGURED else 502
    return JSONResponse(result.as_dict(), status_code=status_code)
