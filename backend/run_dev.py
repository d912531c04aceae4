#!/usr/bin/env python3
"""
开发环境启动脚本

使用方式:
    python run_dev.py
    python run_dev.py --port 8080
    python run_dev.py --no-reload
"""

import argparse
import os
import sys

# 确保 backend 目录在 Python 路径中
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))


def main():
    parser = argparse.ArgumentParser(description="PaperCards Backend Dev Server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")
    parser.add_argument("--reload", action="store_true", default=True, help="Enable auto-reload (default: True)")
    parser.add_argument("--no-reload", dest="reload", action="store_false", help="Disable auto-reload")
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"], help="Log level")

    args = parser.parse_args()

    import uvicorn

    print(f"""
╔══════════════════════════════════════════════════════════════╗
║              📑 PaperCards Backend                           ║
╠══════════════════════════════════════════════════════════════╣
║  Host:     {args.host:<48} ║
║  Port:     {args.port:<48} ║
║  Reload:   {str(args.reload):<48} ║
║  Log:      {args.log_level:<48} ║
╠══════════════════════════════════════════════════════════════╣
║  API Docs: http://{args.host}:{args.port}/docs{' ' * 28}║
╚══════════════════════════════════════════════════════════════╝
    """)

    uvicorn.run(
        "main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        reload_dirs=["src", "api"] if args.reload else None,
    )


if __name__ == "__main__":
    main()
