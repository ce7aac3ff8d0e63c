"""
Run the bridge control API with uvicorn.

Usage:
    python -m walletbridge

Environment variables:
- BRIDGE_API_HOST: Bind address (default: 127.0.0.1)
- BRIDGE_API_PORT: Bind port (default: 8765)
"""

import os

import uvicorn
from dotenv import load_dotenv


def main() -> None:
    load_dotenv()
    uvicorn.run(
        "walletbridge.app:app",
        host=os.getenv("BRIDGE_API_HOST", "127.0.0.1"),
        port=int(os.getenv("BRIDGE_API_PORT", "8765")),
        log_level=os.getenv("BRIDGE_LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
