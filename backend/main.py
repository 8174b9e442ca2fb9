"""
EAT Tilt Controller - Main Entry Point

Run with: uvicorn main:app --reload --port 8000
"""

import sys
from pathlib import Path

# Add backend to path for imports
backend_path = Path(__file__).parent
sys.path.insert(0, str(backend_path))

import uvicorn

from api.app import create_app
from api.dependencies import get_app_state


# API only; this service ships no frontend
app = create_app()


# === Startup/Shutdown Events ===

@app.on_event("startup")
async def startup_event():
    """Print saved settings and auto-connect if configured"""
    print("=" * 50)
    print("  ASG EAT Tilt Controller v1.0")
    print("=" * 50)
    print()

    state = get_app_state()
    settings = state.settings.snapshot()

    print("Saved Settings:")
    print(f"  Port: {settings.selected_port or 'Not set'} @ {settings.baud_rate}")
    print(f"  Orientation: {settings.orientation}")
    print(f"  Timeout: {settings.command_timeout_ms}ms (quiet {settings.quiet_period_ms}ms)")
    print(f"  Auto-connect: {'on' if settings.auto_connect_on_startup else 'off'}")
    print()

    state.controller.try_auto_connect()

    print("API ready at http://localhost:8000")
    print("Docs at http://localhost:8000/docs")
    print()


@app.on_event("shutdown")
async def shutdown_event():
    """Release the serial port on shutdown"""
    state = get_app_state()
    if state.is_connected:
        print("[SHUTDOWN] Disconnecting from device...")
        state.shutdown()


# === Health Check ===

@app.get("/health")
def health_check():
    """Health check endpoint"""
    state = get_app_state()
    return {
        "status": "ok",
        "version": "1.0.0",
        "connected": state.is_connected,
    }


# === Run directly ===

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
