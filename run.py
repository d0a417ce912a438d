#!/usr/bin/env python3
"""
Run script for the AgroVoice report backend
"""
import uvicorn

from agrovoice.config.settings import settings
from agrovoice.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
