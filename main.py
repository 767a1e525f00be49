#!/usr/bin/env python3
"""
Job Tracker - job application tracking API server

Usage:
    python main.py                  # Start the API server
    python main.py --init-db        # Create database tables and exit
    python main.py --config         # Show configuration
    python main.py --port 8080      # Override the configured port
"""
import argparse
from loguru import logger

from job_tracker.config import config
from job_tracker.utils.log_sanitizer import setup_logging


def show_config():
    """Display current configuration"""
    print("\n" + "=" * 60)
    print("JOB TRACKER CONFIGURATION")
    print("=" * 60)
    print(f"\nServer:")
    print(f"  - Host: {config.server.host}")
    print(f"  - Port: {config.server.port}")
    print(f"  - Environment: {config.server.environment}")
    print(f"  - CORS origins: {', '.join(config.server.cors_origins)}")
    print(f"\nAuth:")
    print(f"  - JWT secret set: {bool(config.auth.jwt_secret)}")
    print(f"  - Token lifetime: {config.auth.jwt_expires_in}")
    print(f"\nUploads:")
    print(f"  - Directory: {config.uploads.upload_dir}")
    print(f"  - Max size: {config.uploads.max_upload_mb}MB")
    print("=" * 60 + "\n")


def main():
    parser = argparse.ArgumentParser(description='Job Tracker API server')
    parser.add_argument('--host', default=config.server.host, help='Bind address')
    parser.add_argument('--port', type=int, default=config.server.port, help='Bind port')
    parser.add_argument('--init-db', action='store_true', help='Create database tables and exit')
    parser.add_argument('--config', action='store_true', help='Show configuration')
    parser.add_argument('--reload', action='store_true', help='Reload on code changes (development)')

    args = parser.parse_args()

    if args.config:
        show_config()
        return

    setup_logging(level=config.log_level, log_file=config.log_file)

    if args.init_db:
        from job_tracker.database.db import init_database
        init_database()
        return

    if not config.auth.jwt_secret:
        logger.error("JWT_SECRET is not set; refusing to start")
        raise SystemExit(1)

    import uvicorn
    logger.info(f"Starting Job Tracker API on {args.host}:{args.port} ({config.server.environment})")
    uvicorn.run("job_tracker.api.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == '__main__':
    main()
