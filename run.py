#!/usr/bin/env python3
"""Start the InventSync API with uvicorn."""
import argparse

import uvicorn


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the InventSync API server.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=5001)
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    args = parser.parse_args()

    uvicorn.run("inventsync.api.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
