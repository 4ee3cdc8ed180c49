from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])

@router.get("/healthz")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "service": "pump-control-api"}

@router.get("/api/health")
async def api_health_check(request: Request):
    """API health check with the number of live area sessions"""
    return {"status": "ok", "sessions": len(request.app.state.sync_service.registry)}
