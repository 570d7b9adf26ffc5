from __future__ import annotations

import sys
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

# ============================================================
# プロジェクトルートを sys.path に追加
# （Lambda / uvicorn どちらでも core パッケージを解決できるように）
# ============================================================
ROOT_DIR = Path(__file__).resolve().parents[2]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from core.datawriter.fields import UnsupportedTypeError  # noqa: E402
from core.datawriter.models import EncodeRequest  # noqa: E402
from core.datawriter.service import (  # noqa: E402
    API_VERSION,
    InvalidColumnValueError,
    encode_rows,
)

# ============================================================
# API Gateway 側で /load-data をプレフィックスとしてルーティングしているため、
# FastAPI には root_path="/load-data" を指定し、ルート定義は /v0/... にする
# ============================================================
app = FastAPI(
    title="LOAD DATA Writer API",
    version=API_VERSION,
    description="Encode JSON rows into MySQL LOAD DATA INFILE text (v0.1)",
    root_path="/load-data",
)


def _error_response(code: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "error": {
                "code": code,
                "message": str(exc),
            },
            "meta": {
                "version": API_VERSION,
            },
        },
    )


@app.exception_handler(InvalidColumnValueError)
async def invalid_column_value_handler(_: Request, exc: InvalidColumnValueError) -> JSONResponse:
    return _error_response("INVALID_COLUMN_VALUE", exc)


@app.exception_handler(UnsupportedTypeError)
async def unsupported_type_handler(_: Request, exc: UnsupportedTypeError) -> JSONResponse:
    return _error_response("UNSUPPORTED_TYPE", exc)


@app.get("/v0/health")
async def health():
    return {"ok": True, "version": API_VERSION}


@app.post("/v0/encode")
async def encode_endpoint(payload: EncodeRequest):
    response = encode_rows(payload)
    return response.model_dump()
