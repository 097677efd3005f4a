"""Command-line entry point: serve the API, launch the UI, ingest documents."""

from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from migrassist.backends import BackendFactory
from migrassist.config import config
from migrassist.pipeline import RAGPipeline

if TYPE_CHECKING:
    from collections.abc import Sequence
    from logging import Logger

PROJECT_ROOT = Path(__file__).resolve().parent
DEFAULT_UI = PROJECT_ROOT / "app.py"
API_MODULE = "migrassist.api:app"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Build the CLI parser and read command-line arguments."""  # noqa: DOC201
    parser = argparse.ArgumentParser(
        description="Migration assistant chat API.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the chat API with uvicorn.")
    serve.add_argument(
        "--host",
        default="localhost",
        help="Bind address for the API server (default: localhost).",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=7071,
        help="Port for the API server (default: 7071).",
    )
    serve.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change.",
    )

    ui = subparsers.add_parser("ui", help="Launch the Streamlit chat client.")
    ui.add_argument(
        "--port",
        type=int,
        default=8501,
        help="Port for the Streamlit server (default: 8501).",
    )
    ui.add_argument(
        "--show",
        dest="headless",
        action="store_false",
        help="Open Streamlit in a browser window instead of headless mode.",
    )
    ui.set_defaults(headless=True)

    ingest = subparsers.add_parser(
        "ingest", help="Add documents to the configured vector store."
    )
    ingest.add_argument("paths", nargs="+", type=Path, help="PDF, TXT or MD files.")

    return parser.parse_args(argv)


def build_uvicorn_command(*, host: str, port: int, reload: bool) -> list[str]:
    """Construct the uvicorn CLI invocation."""  # noqa: DOC201
    command = [
        sys.executable,
        "-m",
        "uvicorn",
        API_MODULE,
        "--host",
        host,
        "--port",
        str(port),
    ]
    if reload:
        command.append("--reload")
    return command


def build_streamlit_command(script_path: Path, *, port: int, headless: bool) -> list[str]:
    """Construct the streamlit CLI invocation."""  # noqa: DOC201
    return [
        sys.executable,
        "-m",
        "streamlit",
        "run",
        str(script_path),
        "--server.port",
        str(port),
        "--server.headless",
        "true" if headless else "false",
    ]


def run_command(command: Sequence[str], logger: Logger) -> int:
    """Execute a server command and return its exit code."""  # noqa: DOC201
    try:
        result = subprocess.run(
            command,
            check=False,
            cwd=PROJECT_ROOT,
        )
    except KeyboardInterrupt:
        logger.info("Stopped by user")
        return 0
    except OSError:
        logger.exception("Unable to launch: %s", " ".join(command))
        return 1
    return result.returncode


def ingest(paths: Sequence[Path], logger: Logger) -> int:
    """Ingest every path into the configured vector store."""  # noqa: DOC201
    missing = [path for path in paths if not path.is_file()]
    if missing:
        logger.error("Files not found: %s", ", ".join(str(p) for p in missing))
        return 1

    backend = BackendFactory().create_for_ingestion()
    pipeline = RAGPipeline(backend)
    total = 0
    try:
        for path in paths:
            try:
                total += pipeline.process_document(path)
            except (OSError, ValueError, RuntimeError):
                logger.exception("Failed to ingest %s", path)
                return 1
    finally:
        backend.close()
    logger.info("Ingested %d chunks from %d documents", total, len(paths))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Validate configuration and dispatch the selected command."""  # noqa: DOC201
    args = parse_args(argv)

    config.setup_logging()
    logger = config.get_logger(__name__)

    try:
        config.validate()
    except ValueError:
        logger.exception("Configuration invalid")
        return 1

    if args.command == "ingest":
        return ingest(args.paths, logger)

    if args.command == "serve":
        logger.info(
            "Starting chat API at http://%s:%s (%s backend)",
            args.host,
            args.port,
            "cloud" if config.is_cloud() else "local",
        )
        command = build_uvicorn_command(
            host=args.host, port=args.port, reload=args.reload
        )
    else:
        if not DEFAULT_UI.exists():
            logger.error("Streamlit script not found: %s", DEFAULT_UI)
            return 1
        logger.info("Starting Streamlit client on port %s", args.port)
        command = build_streamlit_command(
            DEFAULT_UI, port=args.port, headless=args.headless
        )

    return_code = run_command(command, logger)
    if return_code != 0:
        logger.error("%s exited with status %s", args.command, return_code)
    return return_code


if __name__ == "__main__":
    sys.exit(main())
