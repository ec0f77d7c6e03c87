"""Main application entry point.

Integrated mode serves the API and the NiceGUI chat page from one uvicorn
server. Separate mode runs the API on PORT and the UI on UI_PORT, with the UI
reaching the API through API_BASE_URL.
Environment variables are loaded from .env file.
"""

import logging
import os
import subprocess
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
UI_PORT = int(os.getenv("UI_PORT", "8080"))


def run_integrated() -> None:
    """Serve the API and the chat page on the same port."""
    import uvicorn
    from nicegui import ui

    from src.api.app import create_app
    from src.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    app = create_app()

    ui.run_with(
        app,
        title="Studio Chat",
        favicon="💬",
        dark=True,
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "studio-chat-secret"),
    )

    logger.info(f"Chat UI available at http://localhost:{PORT}/")
    logger.info(f"API docs available at http://localhost:{PORT}/docs")

    uvicorn.run(
        app,
        host=HOST,
        port=PORT,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def run_separate() -> None:
    """Run the API and the UI as two processes until either exits."""
    logger.info(f"Starting API on http://localhost:{PORT}")
    logger.info(f"Starting chat UI on http://localhost:{UI_PORT}")

    processes = [
        subprocess.Popen(
            [
                sys.executable,
                "-m",
                "uvicorn",
                "src.api.app:app",
                "--host",
                HOST,
                "--port",
                str(PORT),
            ]
        ),
        subprocess.Popen(
            [sys.executable, "-c", "from src.ui.chat_page import main; main()"],
            env={**os.environ, "API_BASE_URL": f"http://localhost:{PORT}"},
        ),
    ]

    try:
        while all(process.poll() is None for process in processes):
            try:
                processes[0].wait(timeout=1)
            except subprocess.TimeoutExpired:
                continue
    except KeyboardInterrupt:
        logger.info("Shutting down servers...")
    finally:
        for process in processes:
            process.terminate()
        for process in processes:
            process.wait()


def main() -> None:
    """Application entry point.

    Set RUN_MODE=separate to run the API and the UI on different ports.
    Default is integrated mode.
    """
    mode = os.getenv("RUN_MODE", "integrated").lower()

    logger.info(f"Starting Studio Chat in {mode} mode")

    if mode == "separate":
        run_separate()
    else:
        run_integrated()


if __name__ == "__main__":
    main()
