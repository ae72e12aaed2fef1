import io
import logging
import os
import uuid
from datetime import datetime
from typing import cast

import pdfplumber
from colorlog import ColoredFormatter
from flask import Flask, current_app, jsonify, request
from waitress import serve
from werkzeug.datastructures import FileStorage

from tocspotter.detect_config import DetectTocConfig
from tocspotter.grouping import only_uniques
from tocspotter.item import Item, ItemType
from tocspotter.item_io import ItemLoadError, items_from_json, items_from_pdf, items_to_json
from tocspotter.logger import LOG_COLORS
from tocspotter.toc_detector import DetectToc
from tocspotter.transformer import PAGE_MAPPING, MissingColumnsError, PageMapping, TransformContext


def strtobool(value: str) -> bool:
    return value.lower() in ("y", "yes", "on", "1", "true", "t", "enabled")


def _int_field(source, name: str, default: int | None) -> int | None:
    value = source.get(name)
    if value in (None, ""):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ItemLoadError(f"'{name}' must be an integer, got {value!r}") from None


def _items_from_upload(file_storage: FileStorage) -> tuple[list[Item], int]:
    current_app.logger.debug(f"Reading uploaded PDF {file_storage.filename}")
    file_storage.stream.seek(0)
    try:
        with pdfplumber.open(cast(io.BytesIO, file_storage.stream)) as pdf:
            return items_from_pdf(pdf), len(pdf.pages)
    except Exception as e:
        current_app.logger.exception(f"Could not read uploaded PDF {file_storage.filename}")
        raise ItemLoadError(f"'{file_storage.filename}' is not a readable PDF") from e


def _read_request():
    """Return items, page count and page factor from either a PDF upload or a JSON body."""
    if "file" in request.files and request.files["file"].filename:
        items, page_count = _items_from_upload(request.files["file"])
        return items, _int_field(request.form, "page_count", page_count), _int_field(request.form, "page_factor", 0)

    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ItemLoadError("expected a JSON object or a 'file' upload")
    items = items_from_json(body.get("items"))
    derived_page_count = max((item.page for item in items), default=0)
    return items, _int_field(body, "page_count", derived_page_count), _int_field(body, "page_factor", 0)


def detect_toc():
    session_id = str(uuid.uuid4())[:8]
    t1 = datetime.now()
    current_app.logger.debug(f"New detection request {session_id}")

    try:
        items, page_count, page_factor = _read_request()
    except ItemLoadError as e:
        current_app.logger.warning(f"[{session_id}] {e}")
        return jsonify({"status": "error", "message": str(e)}), 400

    context = TransformContext(cast(int, page_count), {PAGE_MAPPING: PageMapping(page_factor=cast(int, page_factor))})
    detector = DetectToc(current_app.config["DETECT_TOC_CONFIG"], current_app.logger)
    try:
        result = detector.execute(context, items)
    except MissingColumnsError as e:
        current_app.logger.warning(f"[{session_id}] {e}")
        return jsonify({"status": "error", "message": str(e)}), 400
    except Exception:
        current_app.logger.exception(f"[{session_id}] Fatal error while detecting TOC")
        return jsonify({"status": "error", "message": f"Fatal error in detecting TOC. Session code: {session_id}"}), 500

    current_app.logger.info(f"[{session_id}] {result.messages[0]} in {datetime.now() - t1}")
    return jsonify(
        {
            "status": "success",
            "messages": result.messages,
            "toc_pages": only_uniques(item.page for item in result.items if item.has_type(ItemType.TOC)),
            "items": items_to_json(result.items),
        }
    )


def health():
    return jsonify({"status": "ok"})


def create_app(detect_toc_config: DetectTocConfig | None = None):
    """Entry point for running the Flask application."""
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = 100 * 1024 * 1024  # file size limit in MB
    app.config["DETECT_TOC_CONFIG"] = detect_toc_config if detect_toc_config else DetectTocConfig.from_env()
    app.logger.setLevel(logging.DEBUG if strtobool(os.environ.get("TOCSPOTTER_DEV", "false")) else logging.INFO)
    app.logger.propagate = False

    # Apply color formatter to the default console handler
    for handler in app.logger.handlers:
        if isinstance(handler, logging.StreamHandler):
            handler.setFormatter(ColoredFormatter("%(log_color)s%(asctime)s - %(levelname)s - [APP]: %(message)s", log_colors=LOG_COLORS, reset=True))

    app.add_url_rule("/health", view_func=health, methods=["GET"])
    app.add_url_rule("/detect_toc", view_func=detect_toc, methods=["POST"])
    return app


def main():
    """Creates and runs the Flask application."""
    created_app = create_app()
    host = os.environ.get("TOCSPOTTER_HOST", "0.0.0.0")  # nosec B104
    port = int(os.environ.get("TOCSPOTTER_PORT", "7002"))

    created_app.logger.info("tocspotter starting...")

    if strtobool(os.environ.get("TOCSPOTTER_DEV", "false")):
        created_app.logger.info(f"APP - Starting in DEVELOPMENT mode on {host}:{port}")
        created_app.run(host=host, port=port, debug=True)  # nosec B201
    else:
        created_app.logger.info(f"APP - Server started on {host}:{port} (Production/Waitress).")
        serve(created_app, host=host, port=port, threads=4, connection_limit=100, channel_timeout=120)


if __name__ == "__main__":
    main()
