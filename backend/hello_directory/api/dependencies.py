"""
FastAPI dependency getters.

Services live on the container stored in ``app.state`` by the lifespan.
"""

from fastapi import Request

from ..domain.users.domain_services import UserDirectory
from ..services.container import ServiceContainer
from ..services.hello_service import HelloService


def get_container(request: Request) -> ServiceContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("Service container not initialized")
    return container


def get_hello_service(request: Request) -> HelloService:
    return get_container(request).hello_service


def get_user_directory(request: Request) -> UserDirectory:
    return get_container(request).user_directory
