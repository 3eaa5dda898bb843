#!/usr/bin/env python3
"""
Development startup script for the Test Case Platform API
"""

import sys
from pathlib import Path


def main():
    """Main startup function"""
    print("🚀 Starting Test Case Platform API...")

    if not Path(".env").exists():
        print("⚠️  .env file not found, using defaults (see app/config/settings.py)")

    Path("data").mkdir(exist_ok=True)

    import uvicorn
    from app.config.settings import settings

    print(f"📚 API Documentation: http://localhost:{settings.api_port}{settings.api_prefix}/docs")
    print(f"🏥 Health Check: http://localhost:{settings.api_port}{settings.api_prefix}/health")
    print("🔄 Use Ctrl+C to stop the server")

    try:
        uvicorn.run(
            "main:app",
            host=settings.api_host,
            port=settings.api_port,
            reload=True,
            log_level=settings.log_level.lower()
        )
    except KeyboardInterrupt:
        print("\n👋 Server stopped by user")
    except Exception as e:
        print(f"❌ Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
