"""Run the API with uvicorn: ``python -m sideline.api``."""

from __future__ import annotations

import os

import uvicorn

from sideline.api import create_app


def main() -> None:
    uvicorn.run(
        create_app(),
        host=os.getenv("SIDELINE_HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    main()
