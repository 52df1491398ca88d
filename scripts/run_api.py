#!/usr/bin/env python3
"""
HealthBuddy — Запуск API сервера

Запуск:
    python scripts/run_api.py
    python scripts/run_api.py --port 8080
    python scripts/run_api.py --config config/health_buddy.yaml --assessments data/assessments

Секрети задаються через оточення:
    INFERMEDICA_APP_ID, INFERMEDICA_APP_KEY, GEMINI_API_KEY
"""

import argparse
import logging
import os
import sys
from pathlib import Path

# Додаємо корінь проекту до path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def main():
    parser = argparse.ArgumentParser(description='HealthBuddy API Server')
    parser.add_argument('--host', default='0.0.0.0', help='Host (default: 0.0.0.0)')
    parser.add_argument('--port', type=int, default=8000, help='Port (default: 8000)')
    parser.add_argument('--reload', action='store_true', help='Enable auto-reload')
    parser.add_argument('--config', default=None, help='YAML конфігурація інтерв\'ю')
    parser.add_argument('--assessments', default=None, help='Каталог для JSON результатів')
    parser.add_argument('--log-level', default='info',
                        choices=['debug', 'info', 'warning', 'error'])

    args = parser.parse_args()

    # Налаштування читаються health_buddy.api.config при імпорті
    os.environ["API_HOST"] = args.host
    os.environ["API_PORT"] = str(args.port)
    if args.config:
        os.environ["HEALTH_BUDDY_CONFIG"] = args.config
    if args.assessments:
        os.environ["ASSESSMENTS_DIR"] = args.assessments

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 60)
    print("🏥 HealthBuddy — API Server")
    print("=" * 60)
    print(f"   Host: {args.host}")
    print(f"   Port: {args.port}")
    print(f"   Reload: {args.reload}")
    print(f"   Config: {args.config or 'defaults'}")
    print(f"   Assessments: {args.assessments or 'in memory'}")
    print("=" * 60)

    import uvicorn

    uvicorn.run(
        "health_buddy.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
