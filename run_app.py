#!/usr/bin/env python3
"""
Vitals Storefront Runner
========================

Run the storefront cart/checkout API in development or production mode.

Usage:
    python run_app.py                    # Development mode with auto-reload
    python run_app.py --mode prod        # Production mode
    python run_app.py --port 8001        # Custom port
    python run_app.py --host 127.0.0.1   # Custom host
"""

import argparse
import os
import sys


def check_environment() -> bool:
    """Check if environment is properly set up"""
    print("\n🔍 Checking environment...")

    if os.path.exists(".env"):
        print("✅ .env file found")
    elif not os.environ.get("SECRET_KEY"):
        print("❌ SECRET_KEY is not set and no .env file was found")
        return False
    else:
        print("⚠️  .env file not found, using environment variables")

    if os.environ.get("RAZORPAY_KEY_ID") or os.path.exists(".env"):
        print("✅ Payment settings will be read from the environment")
    else:
        print("⚠️  Razorpay keys not set; only cash on delivery will be offered")

    return True


def run_app(host: str, port: int, reload: bool, workers: int) -> None:
    """Run the FastAPI application"""
    print(f"\n🚀 Starting storefront API on {host}:{port}")
    print(f"📖 API Docs: http://{host}:{port}/api/docs")
    print("\n" + "=" * 50)

    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=1 if reload else workers,
        log_level="info"
    )


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Vitals Storefront Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "--mode",
        choices=["dev", "prod"],
        default="dev",
        help="Server mode (default: dev)"
    )
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")
    parser.add_argument("--workers", type=int, default=4, help="Worker processes in prod mode")

    args = parser.parse_args()

    if not check_environment():
        return 1

    run_app(args.host, args.port, reload=args.mode == "dev", workers=args.workers)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n👋 Server stopped by user")
        sys.exit(0)
