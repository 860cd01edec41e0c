#!/usr/bin/env python3
"""Run script for the multizone backend API."""

import logging

import uvicorn

from multizone.config import load_settings

if __name__ == "__main__":
    settings = load_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "multizone.api.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.port,
    )
