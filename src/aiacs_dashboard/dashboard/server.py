"""
Dashboard server - serves the output directory over HTTP.

Runs `python -m http.server` as a child process so a slow browser never
blocks the pollers.
"""

import logging
import os
import socket
import subprocess
import sys

from ..utils.constants import DEFAULT_SERVER_PORT

logger = logging.getLogger(__name__)


def _get_local_ip() -> str:
    """Get local IP address for remote access."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            # No packet is sent; connect() only picks the outbound interface
            s.connect(("8.8.8.8", 80))
            return s.getsockname()[0]
    except OSError:
        return "localhost"


def _port_in_use(port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        return sock.connect_ex(("localhost", port)) == 0


def start_dashboard_server(
    directory: str, port: int = DEFAULT_SERVER_PORT
) -> tuple[str, subprocess.Popen | None]:
    """
    Start a static file server for the dashboard directory.

    Returns:
        Tuple of (URL string, server process or None if not started)
    """
    os.makedirs(directory, exist_ok=True)
    url = f"http://{_get_local_ip()}:{port}/"

    if _port_in_use(port):
        logger.warning(f"Port {port} already in use, assuming a server is running")
        return url, None

    try:
        server = subprocess.Popen(
            [sys.executable, "-m", "http.server", str(port), "--bind", "0.0.0.0"],
            cwd=directory,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError as e:
        logger.error(f"Could not start dashboard server: {e}")
        return url, None

    logger.info(f"Dashboard server: {url}")
    return url, server


def stop_dashboard_server(server: subprocess.Popen | None) -> None:
    if server is None:
        return
    server.terminate()
    try:
        server.wait(timeout=5)
    except subprocess.TimeoutExpired:
        server.kill()
