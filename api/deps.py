from fastapi import Request

from core.container import AppServices


def get_services(request: Request) -> AppServices:
    return request.app.state.services
