from fastapi import APIRouter, Depends, Request, Response

from app.api import deps
from app.functions.publish_apply_event import handler
from app.services.event_bus import EventBus

router = APIRouter(prefix="/functions", tags=["functions"])


@router.post("/publish-apply-event")
async def publish_apply_event_url(request: Request, bus: EventBus = Depends(deps.get_event_bus)):
    body = await request.body()
    result = await handler({"body": body.decode("utf-8", errors="replace"), "isBase64Encoded": False}, bus=bus)
    return Response(content=result["body"], status_code=result["statusCode"], media_type="application/json")
