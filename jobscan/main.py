# jobscan/main.py
from __future__ import annotations
import os
import uuid
from pathlib import Path
from typing import Optional
from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.utils import secure_filename

from jobscan.errors import ImageProcessingError, OcrUnavailableError
from jobscan.extractors.ocr_engines import ENGINES, get_engine
from jobscan.pipeline import scan_image, scan_registration, scan_job_card

ALLOWED_EXTS = {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".tif", ".tiff"}

SCAN_MODES = {
    "auto":         scan_image,
    "registration": scan_registration,
    "job_card":     scan_job_card,
}


def _max_upload_bytes() -> int:
    v = os.getenv("MAX_UPLOAD_MB", "16")
    return (int(v) if v.isdigit() else 16) * 1024 * 1024


def create_app(instance_path: Optional[str] = None) -> Flask:
    app = Flask(__name__, instance_path=instance_path)
    app.config["MAX_CONTENT_LENGTH"] = _max_upload_bytes()
    CORS(app)

    (Path(app.instance_path) / "uploads").mkdir(parents=True, exist_ok=True)

    @app.get("/")
    def root():
        return jsonify({"ok": True, "service": "jobscan", "path": "/"}), 200

    @app.get("/health")
    def health():
        return jsonify({"ok": True}), 200

    @app.get("/healthz")
    def healthz():
        return jsonify({"ok": True, "service": "jobscan"}), 200

    @app.get("/debug/info")
    def debug_info():
        import shutil, sys
        bins = {
            "tesseract": shutil.which("tesseract") or "",
            "python": sys.executable,
            "ocr_provider": os.getenv("OCR_PROVIDER", ""),
            "port": os.getenv("PORT", ""),
        }
        return jsonify({"ok": True, "bins": bins}), 200

    @app.post("/scan")
    def api_scan():
        file = request.files.get("file")
        if not file or not getattr(file, "filename", ""):
            return _json_err("bad_request", "No file received", 400)
        ext = Path(file.filename).suffix.lower()
        if ext not in ALLOWED_EXTS:
            return _json_err("unsupported_type", f"Unsupported extension: {ext}", 415)

        mode = (request.args.get("mode") or "auto").lower()        # auto | registration | job_card
        engine = (request.args.get("engine") or "auto").lower()    # auto | tesseract | paddle | mock
        if mode not in SCAN_MODES:
            return _json_err("bad_request", f"Unknown mode: {mode}", 400)
        if engine != "auto" and engine not in ENGINES:
            return _json_err("bad_request", f"Unknown engine: {engine}", 400)

        safe_name = secure_filename(file.filename) or f"upload{ext}"
        dest = Path(app.instance_path) / "uploads" / f"{uuid.uuid4().hex[:8]}-{safe_name}"
        file.save(dest)
        try:
            result = SCAN_MODES[mode](dest, ocr=get_engine(engine), logger=app.logger)
        except ImageProcessingError as e:
            return _json_err("image_unreadable", str(e), 422)
        except OcrUnavailableError as e:
            return _json_err("ocr_unavailable", str(e), 503)
        except Exception as e:
            app.logger.exception("scan failed")
            return _json_err("internal_error", str(e), 500)
        finally:
            dest.unlink(missing_ok=True)

        data = result.to_dict()
        return jsonify({"ok": True, "flat": data["flat"], "fields": data["fields"],
                        "ocr": data["ocr"], "meta": data["meta"]})

    return app


def _json_err(code: str, msg: str, status: int):
    return jsonify({"ok": False, "error": {"code": code, "message": msg}}), status
