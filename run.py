#!/usr/bin/env python3
"""
Speech Practice - System Runner

    python run.py          start the server and keep it running
    python run.py test     start the server, run the smoke test, stop
    python run.py status   print /api/status of an already running server
"""

import argparse
import logging
import subprocess
import sys
import time
from pathlib import Path

import requests

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

REQUIRED_MODULES = [
    "fastapi", "uvicorn", "pydantic_settings", "sqlalchemy", "redis",
    "openai", "livekit.api", "firebase_admin", "numpy",
]

def check_environment() -> bool:
    """Importable dependencies and no configuration errors"""
    import importlib

    for module in REQUIRED_MODULES:
        try:
            importlib.import_module(module)
        except ImportError as e:
            logger.error(f"❌ Missing dependency: {e}. Run: pip install -e .")
            return False

    from speech_practice.config import settings
    issues = settings.validate_config()
    for issue in issues:
        (logger.error if issue.startswith("ERROR") else logger.warning)(issue)
    return not any(issue.startswith("ERROR") for issue in issues)

class ServerProcess:
    """uvicorn in a child process, stopped on exit"""

    def __init__(self, port: int):
        self.port = port
        self.base_url = f"http://localhost:{port}"
        self.process = None

    def __enter__(self):
        logger.info(f"🚀 Starting server on port {self.port}...")
        self.process = subprocess.Popen(
            [sys.executable, "-m", "uvicorn", "speech_practice.main:app",
             "--host", "0.0.0.0", "--port", str(self.port)],
            cwd=project_root,
        )
        return self

    def __exit__(self, *exc_info):
        if self.process and self.process.poll() is None:
            self.process.terminate()
            try:
                self.process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                self.process.kill()
        logger.info("Server stopped")

    def wait_until_healthy(self, timeout: float = 20.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if self.process.poll() is not None:
                logger.error(f"❌ Server exited with code {self.process.returncode}")
                return False
            try:
                if requests.get(f"{self.base_url}/api/health", timeout=2).status_code == 200:
                    logger.info(f"✅ Server healthy at {self.base_url}")
                    return True
            except requests.RequestException:
                pass
            time.sleep(0.5)
        logger.error("❌ Server did not become healthy in time")
        return False

def show_status(base_url: str) -> bool:
    try:
        data = requests.get(f"{base_url}/api/status", timeout=5).json()
    except requests.RequestException as e:
        logger.error(f"❌ Status check failed: {e}")
        return False

    print(f"\n📊 Speech Practice v{data.get('version')} ({data.get('environment')})")
    for feature, value in data.get("features", {}).items():
        print(f"   {feature}: {value}")
    if data.get("missing_environment"):
        print(f"   missing environment: {', '.join(data['missing_environment'])}")
    return True

def main():
    parser = argparse.ArgumentParser(description="Run the Speech Practice server")
    parser.add_argument("mode", nargs="?", default="serve", choices=["serve", "test", "status"])
    parser.add_argument("--port", type=int, default=5000)
    args = parser.parse_args()

    if args.mode == "status":
        sys.exit(0 if show_status(f"http://localhost:{args.port}") else 1)

    if not check_environment():
        sys.exit(1)

    with ServerProcess(args.port) as server:
        if not server.wait_until_healthy():
            sys.exit(1)

        if args.mode == "test":
            from testing.smoke_client import SmokeTestClient
            sys.exit(0 if SmokeTestClient(server.base_url).run() else 1)

        show_status(server.base_url)
        try:
            server.process.wait()
        except KeyboardInterrupt:
            logger.info("Stopped by user")

if __name__ == "__main__":
    main()
