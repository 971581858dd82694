"""
Run the service with uvicorn.

Usage:
    python -m scan2order
    python -m scan2order --port 8001 --reload
    python -m scan2order --backend json
"""

import argparse
import os


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the scan2order ordering service")
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=int(os.getenv("PORT", "8000")),
        help="Port to run on (default: 8000)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--backend",
        choices=["sql", "json"],
        help="Order store backend (overrides STORE_BACKEND)",
    )
    args = parser.parse_args(argv)

    # Must be set before scan2order.config is imported by the app
    if args.backend:
        os.environ["STORE_BACKEND"] = args.backend

    import uvicorn

    uvicorn.run(
        "scan2order.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
