"""
Greeting endpoint.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from ...services.hello_service import HelloService
from ..dependencies import get_hello_service

router = APIRouter(tags=["hello"])


@router.get("/hello", response_class=PlainTextResponse)
async def hello(
    name: Optional[str] = Query(None, description="Name to greet"),
    service: HelloService = Depends(get_hello_service),
) -> str:
    return await service.hello(name)
