"""Entrypoint to run the Clovet API server locally."""

import os

import uvicorn

from server.api import DEFAULT_PORT


def main() -> None:
    port = int(os.getenv("PORT", DEFAULT_PORT))
    uvicorn.run("server.api:app", host="0.0.0.0", port=port, reload=False)


if __name__ == "__main__":
    main()
