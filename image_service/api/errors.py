from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from image_service.errors import InvalidArgument, InvalidTransition, NotFound

_STATUS_CODES = {
    InvalidArgument: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    InvalidTransition: status.HTTP_409_CONFLICT,
}


def register_exception_handlers(app: FastAPI) -> None:
    for exc_class, status_code in _STATUS_CODES.items():

        async def handler(_: Request, exc: Exception, status_code: int = status_code) -> JSONResponse:
            return JSONResponse(status_code=status_code, content={"detail": str(exc)})

        app.add_exception_handler(exc_class, handler)
