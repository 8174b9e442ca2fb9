"""
Device Routes - Settings, motor configuration, EEPROM, orientation, raw commands
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional

from controller import TiltController
from core.logger import set_serial_logging
from ..dependencies import get_controller, require_connection

router = APIRouter(tags=["device"])


class SettingsUpdate(BaseModel):
    selected_port: Optional[str] = None
    baud_rate: Optional[int] = None
    auto_connect_on_startup: Optional[bool] = None
    command_timeout_ms: Optional[int] = None
    quiet_period_ms: Optional[int] = None
    default_step_size: Optional[int] = None
    log_serial_traffic: Optional[bool] = None


class MotorConfigRequest(BaseModel):
    parameter: str
    value: int


class OrientationRequest(BaseModel):
    orientation: int


class RawRequest(BaseModel):
    command: str


# === Settings ===

@router.get("/settings")
def get_settings(ctrl: TiltController = Depends(get_controller)):
    """Get all saved settings."""
    return ctrl.settings.to_dict()


@router.put("/settings")
def update_settings(req: SettingsUpdate, ctrl: TiltController = Depends(get_controller)):
    """Update and save settings. Out-of-range values are clamped."""
    values = {name: value for name, value in req.model_dump().items() if value is not None}
    ctrl.settings.update(**values)
    ctrl.settings.save()
    if "log_serial_traffic" in values:
        set_serial_logging(values["log_serial_traffic"])
    return ctrl.settings.to_dict()


# === Motor configuration ===

@router.post("/motor_config")
def set_motor_config(req: MotorConfigRequest, ctrl: TiltController = Depends(get_controller)):
    """
    Send speed / max_speed / acceleration to the device.

    Works while disconnected: connects with the saved port just for this.
    """
    record = ctrl.set_motor_config(req.parameter, req.value)
    return {
        "success": not record.lines[0].startswith("[ERROR]"),
        "command": record.command,
        "response": record.lines,
        "motor_config": ctrl.motor_config.to_dict(),
    }


@router.get("/eeprom")
def read_eeprom(ctrl: TiltController = Depends(require_connection)):
    """Read motor configuration from device EEPROM."""
    config = ctrl.read_eeprom()
    return {"motor_config": config.to_dict(), "response": ctrl.last_response}


# === Orientation ===

@router.post("/orientation")
def set_orientation(req: OrientationRequest, ctrl: TiltController = Depends(get_controller)):
    """Set mounting orientation (1-4 = 0/90/180/270 degrees clockwise)."""
    record = ctrl.set_orientation(req.orientation)
    return {
        "success": True,
        "orientation": ctrl.settings.get("orientation"),
        "sent": record is not None,
        "display_positions": ctrl.display_positions(),
    }


# === Firmware & raw ===

@router.get("/firmware")
def get_firmware(ctrl: TiltController = Depends(require_connection)):
    """Query firmware version."""
    return {"firmware_version": ctrl.firmware_version(), "response": ctrl.last_response}


@router.post("/raw")
def send_raw(req: RawRequest, ctrl: TiltController = Depends(require_connection)):
    """Send a raw command line."""
    record = ctrl.send_raw(req.command)
    return {"command": record.command, "response": record.lines}
