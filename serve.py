"""Run the season planner API with uvicorn.

Run with:  python3 serve.py
"""

from __future__ import annotations

import uvicorn

from core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("api.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
