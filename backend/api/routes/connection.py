"""
Connection Routes - Connect/disconnect, ports and status
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional

from core.coordinator import ConnectionCoordinator
from controller import TiltController
from ..dependencies import get_controller

router = APIRouter(tags=["connection"])


class ConnectRequest(BaseModel):
    port: Optional[str] = None
    baud_rate: Optional[int] = None


@router.get("/ports")
def get_ports():
    """List available serial ports."""
    return {"ports": ConnectionCoordinator.list_ports()}


@router.get("/baud_rates")
def get_baud_rates():
    """List supported baud rates."""
    return {"baud_rates": list(ConnectionCoordinator.SUPPORTED_BAUD_RATES)}


@router.get("/status")
def get_status(ctrl: TiltController = Depends(get_controller)):
    """Get current connection status and device state."""
    return ctrl.get_status()


@router.get("/history")
def get_history(limit: int = 50, ctrl: TiltController = Depends(get_controller)):
    """Get recent command history."""
    return {"history": [r.to_dict() for r in ctrl.get_command_history(limit)]}


@router.post("/connect")
def connect(req: ConnectRequest, ctrl: TiltController = Depends(get_controller)):
    """Connect to the EAT device (saved port / baud if omitted)."""
    success = ctrl.connect(req.port, req.baud_rate)
    return {
        "success": success,
        "message": ctrl.connection_status if success else "Connection failed. Check port and device.",
        "positions": ctrl.positions.to_dict(),
    }


@router.post("/disconnect")
def disconnect(ctrl: TiltController = Depends(get_controller)):
    """Disconnect from the EAT device."""
    ctrl.disconnect()
    return {"success": True}
