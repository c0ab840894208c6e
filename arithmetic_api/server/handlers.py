"""Exception handlers turning every failure into a JSON {"error": ...} body."""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from arithmetic_api.common.errors import CalculatorError
from arithmetic_api.common.logger import logger

NOT_FOUND_MESSAGE: str = "This endpoint does not exists."
INTERNAL_ERROR_MESSAGE: str = "Internal server error."


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register the API's exception handlers on a FastAPI application.

    Handles:
        - CalculatorError: invalid parameters, invalid expressions and
          arithmetic failures (400)
        - Starlette HTTP errors: unknown routes and wrong methods (404),
          anything else keeps its status code
        - Any other exception: logged with its traceback (500)

    :param FastAPI app: Application to register the handlers on
    """

    @app.exception_handler(CalculatorError)
    async def calculator_error_handler(request: Request, exc: CalculatorError) -> JSONResponse:
        logger.warning(f"⚠️ {request.method} {request.url.path} rejected ({exc.code}): {exc}")
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Wrong method on a known path is reported like an unknown route
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content={"error": NOT_FOUND_MESSAGE})
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"💥 {request.method} {request.url.path} failed: {exc!r}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})
