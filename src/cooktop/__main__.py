"""Entry point for the cooktop control core."""

import argparse
import logging
import os
import sys


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Induction Cooktop Control Core",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind the dashboard API to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind the dashboard API to (default: 8000)",
    )
    parser.add_argument(
        "--env",
        default=None,
        help="Configuration environment (default: COOKTOP_ENV or 'development')",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the simulation noise source (reproducible runs)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--no-access-log",
        action="store_true",
        help="Disable access logging (the dashboard polls often)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Set environment variables for configuration
    if args.env:
        os.environ["COOKTOP_ENV"] = args.env
    if args.seed is not None:
        os.environ["COOKTOP_SEED"] = str(args.seed)

    # Import uvicorn here to avoid import errors if not installed
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn is required. Install with: pip install uvicorn[standard]")
        return 1

    uvicorn.run(
        "cooktop.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
        access_log=not args.no_access_log,
    )

    return 0


if __name__ == "__main__":
    sys.exit(main())
