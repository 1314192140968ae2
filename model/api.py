# model/api.py
from pydantic import BaseModel
from model.verdict import VerdictResult
from util.enums import BackendName


class CheckMeta(BaseModel):
    pageCount: int | None = None
    model: str
    textLength: int


class CheckResponse(BaseModel):
    meta: CheckMeta
    results: list[VerdictResult]


class BackendInfo(BaseModel):
    name: BackendName
    configured: bool
    model: str


class BackendsResponse(BaseModel):
    default: BackendName
    model: str
    backends: list[BackendInfo]


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    message: str
