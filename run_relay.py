#!/usr/bin/env python
"""
LogiFlow - HTTP Relay Launcher

Usage:
    python run_relay.py

Environment Variables (set in .env file):
    - HOST: Server host (default: 127.0.0.1)
    - PORT: Server port (default: 5000)
    - LOG_LEVEL: Logging level (default: INFO)
    - LOGIFLOW_STORAGE_DIR: Directory for JSON order/schedule files (default: in-memory)
    - ALLOWED_ORIGINS: Comma-separated CORS origins (default: *)
    - LOGIFLOW_SEED_DEFAULTS: Register the default line, vehicle and driver (default: true)
    - LOGIFLOW_DEPOT_LAT / LOGIFLOW_DEPOT_LNG: Depot coordinates
    - LOGIFLOW_ADDRESS_BOOK: JSON file mapping delivery addresses to {"lat", "lng"}
"""

from dotenv import load_dotenv

# Load environment variables before reading any configuration
load_dotenv()

from logiflow.api import create_app
from logiflow.config import RelayConfig


def main():
    config = RelayConfig.from_env()
    app = create_app(config)
    print(f"LogiFlow relay running on http://{config.host}:{config.port}")
    app.run(host=config.host, port=config.port, debug=False)


if __name__ == '__main__':
    main()
