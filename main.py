"""Serve a random file from a directory"""

import logging
import mimetypes
from pathlib import Path
from typing import Optional

from flask import Flask, Response, request

from file_index import FileIndex, FileServeError, ReadFailure
from request_parsing import parse_request
from settings import settings

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_content_type(path: Path) -> str:
    mime_type, _ = mimetypes.guess_type(Path(path).name)
    return mime_type or DEFAULT_CONTENT_TYPE


def build_file_response(path: Path) -> Response:
    """Read the whole file and answer with its bytes and guessed type"""
    try:
        content = Path(path).read_bytes()
    except OSError as e:
        raise ReadFailure(f"Cannot read {path}: {e}") from e

    return Response(content, status=200, content_type=guess_content_type(path))


def empty_not_found() -> Response:
    return Response(b"", status=404)


def create_app(files_dir: Optional[Path] = None) -> Flask:
    """Build the app around its own file index"""
    app = Flask(__name__)
    app.extensions["file_index"] = FileIndex(
        root=files_dir if files_dir is not None else settings.FILES_DIR
    )

    @app.route("/", defaults={"subdir": ""})
    @app.route("/<path:subdir>")
    def random_file(subdir: str):
        """Serve one random file from the requested subdirectory"""
        target = parse_request(request.environ)
        logger.info(f"Handling request for subdirectory: {target.subdir!r}")

        index: FileIndex = app.extensions["file_index"]
        selected = index.choose(target.subdir, force_refresh=target.refresh_cache)
        # the index lock is released here; reading happens outside it
        return build_file_response(selected)

    @app.errorhandler(FileServeError)
    def file_not_found(error: FileServeError):
        """Every failure looks the same to the client"""
        logger.warning(f"Not found: {error}")
        return empty_not_found()

    @app.errorhandler(404)
    def route_not_found(error):
        return empty_not_found()

    @app.after_request
    def disable_client_cache(response: Response):
        """Each request should get a fresh pick"""
        if response.status_code == 200:
            response.headers["Cache-Control"] = (
                "no-store, no-cache, must-revalidate, max-age=0"
            )
            response.headers["Pragma"] = "no-cache"
            response.headers["Expires"] = "0"
        return response

    return app


app = create_app()


def main():
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        f"Serving random files from '{settings.FILES_DIR}' "
        f"on {settings.LISTEN_HOST}:{settings.LISTEN_PORT}"
    )
    app.run(host=settings.LISTEN_HOST, port=settings.LISTEN_PORT, threaded=True)


if __name__ == "__main__":
    main()
