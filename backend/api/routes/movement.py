"""
Movement Routes - Tilt, backfocus, zero, position queries

Directions and corners are in screen terms; the controller remaps them
for the current orientation.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional

from controller import CommandRecord, TiltController
from ..dependencies import require_connection

router = APIRouter(tags=["movement"])


class TiltRequest(BaseModel):
    direction: str
    steps: Optional[int] = None


class CornerRequest(BaseModel):
    corner: str
    steps: Optional[int] = None


class BackfocusRequest(BaseModel):
    steps: Optional[int] = None


class MotorPositionRequest(BaseModel):
    motor: int
    position: int


def _result(record: CommandRecord, ctrl: TiltController) -> dict:
    return {
        "success": True,
        "command": record.command,
        "response": record.lines,
        "finished_movement": record.finished_movement,
        "positions": ctrl.positions.to_dict(),
    }


@router.post("/tilt")
def tilt(req: TiltRequest, ctrl: TiltController = Depends(require_connection)):
    """Directional tilt: top, right, bottom, left."""
    return _result(ctrl.tilt(req.direction, req.steps), ctrl)


@router.post("/corner")
def tilt_corner(req: CornerRequest, ctrl: TiltController = Depends(require_connection)):
    """Corner tilt: top-left, top-right, bottom-left, bottom-right."""
    return _result(ctrl.tilt_corner(req.corner, req.steps), ctrl)


@router.post("/backfocus")
def backfocus(req: BackfocusRequest, ctrl: TiltController = Depends(require_connection)):
    """Move all 4 motors. Negative steps move out."""
    return _result(ctrl.backfocus(req.steps), ctrl)


@router.post("/zero")
def zero(ctrl: TiltController = Depends(require_connection)):
    """Zero all axes."""
    return _result(ctrl.zero(), ctrl)


@router.get("/positions")
def get_positions(ctrl: TiltController = Depends(require_connection)):
    """Read positions from the device."""
    positions = ctrl.query_positions()
    return {
        "positions": positions.to_dict(),
        "display_positions": ctrl.display_positions(),
    }


@router.post("/positions/save")
def save_positions(ctrl: TiltController = Depends(require_connection)):
    """Persist current positions to device EEPROM."""
    return _result(ctrl.save_positions(), ctrl)


@router.post("/motor_position")
def set_motor_position(req: MotorPositionRequest, ctrl: TiltController = Depends(require_connection)):
    """Force-set one motor's absolute position."""
    return _result(ctrl.set_motor_position(req.motor, req.position), ctrl)
