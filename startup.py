# startup.py - Run this file to start the application
import argparse
import os
import signal
import socket
import subprocess
import sys
import threading
import time
import webbrowser
import platform

from checktable.core.config import get_settings
from checktable.services.table_store import TableStore


def is_server_running(port):
    """Check if server is already running on the specified port"""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.settimeout(2)
            return sock.connect_ex(('127.0.0.1', port)) == 0
    except OSError:
        return False


def launch_browser(url, delay=2):
    """Open the table page once the server had time to start"""
    time.sleep(delay)
    print(f"Opening {url} ...")
    webbrowser.open(url)


def ensure_data_file(settings):
    """Create an empty table document when none exists"""
    store = TableStore(settings.data_file)
    if store.initialize():
        print(f"Created empty table document: {settings.data_file}")
    else:
        print(f"Using table document: {settings.data_file}")


def start_server(settings):
    """Start uvicorn in a child process"""
    print("Starting application server...")

    env = os.environ.copy()
    env["PYTHONUNBUFFERED"] = "1"  # Unbuffered output

    cmd = [
        sys.executable, "-m", "uvicorn",
        "checktable.main:app",
        "--host", settings.HOST,
        "--port", str(settings.PORT),
        "--log-level", settings.LOG_LEVEL.lower(),
    ]
    if settings.RELOAD:
        cmd.append("--reload")

    return subprocess.Popen(cmd, env=env)


def main():
    """Main function to start the application"""
    parser = argparse.ArgumentParser(description="Run the check table server")
    parser.add_argument("--init", action="store_true",
                        help="create an empty table document if none exists")
    parser.add_argument("--no-browser", action="store_true",
                        help="do not open a browser window")
    args = parser.parse_args()

    settings = get_settings()
    url = f"http://localhost:{settings.PORT}"

    if args.init:
        ensure_data_file(settings)

    # Check if server is already running
    if is_server_running(settings.PORT):
        print(f"Server is already running on port {settings.PORT}")
        if not args.no_browser:
            launch_browser(url, delay=0)
        return

    server_process = start_server(settings)

    # Handle graceful shutdown
    def signal_handler(sig, frame):
        print("\nShutting down server...")
        server_process.terminate()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    if platform.system() != 'Windows':
        signal.signal(signal.SIGTERM, signal_handler)

    if not args.no_browser:
        threading.Thread(target=launch_browser, args=(url,), daemon=True).start()

    print(f"Server is running on {url}")
    try:
        server_process.wait()
    except KeyboardInterrupt:
        print("\nShutting down server...")
        server_process.terminate()


if __name__ == "__main__":
    main()
