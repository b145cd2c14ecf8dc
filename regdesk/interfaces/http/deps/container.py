"""Access to the application container from request handlers."""

from fastapi import Request

from regdesk.core.container import ApplicationContainer


def get_container(request: Request) -> ApplicationContainer:
    return request.app.state.container


__all__ = ["get_container"]
