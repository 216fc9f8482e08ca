from fastapi import APIRouter, Request

router = APIRouter(prefix="/health", tags=["health"])

@router.get("")
def health():
    return {"ok": True}

@router.get("/status")
def status(request: Request):
    orch = request.app.state.orchestrator
    return {"ok": orch.state == "running", **orch.get_status()}

@router.get("/gps")
def gps_status(request: Request):
    """
    Current location snapshot only.
    """
    return request.app.state.orchestrator.tracker.get_status()
