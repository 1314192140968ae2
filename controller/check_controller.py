# controller/check_controller.py
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from controller.controller_dependencies import (
    enforce_max_upload_size,
    get_check_service,
    rate_limit_dependencies,
)
from model.api import BackendsResponse, CheckResponse
from service.check_service import CheckService
from util.constants import InternalURIs

check_router = APIRouter(dependencies=rate_limit_dependencies())


@check_router.post(
    InternalURIs.CHECK,
    response_model=CheckResponse,
    dependencies=[Depends(enforce_max_upload_size)],
)
async def check_pdf(
    pdf: Optional[UploadFile] = File(None),
    rules: Optional[List[str]] = Form(None),
    provider: Optional[str] = Form(None),
    service: CheckService = Depends(get_check_service),
) -> CheckResponse:
    return await service.check_document(pdf, rules, provider)


@check_router.get(InternalURIs.BACKENDS, response_model=BackendsResponse)
async def list_backends(
    service: CheckService = Depends(get_check_service),
) -> BackendsResponse:
    return service.describe_backends()
