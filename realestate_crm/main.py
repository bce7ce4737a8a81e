"""
Name: Backend ASGI Entrypoint (realestate_crm.main)

Responsibilities:
  - Re-export the FastAPI app for ASGI servers and tooling
  - Keep this module side-effect free beyond importing realestate_crm.api.main

Notes/Constraints:
  - uvicorn realestate_crm.main:app
  - No configuration or IO should live here
"""

from realestate_crm.api.main import app

__all__ = ["app"]
