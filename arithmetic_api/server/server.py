"""HTTP server hosting the arithmetic API with uvicorn."""
from pydantic import BaseModel, ConfigDict, Field
import uvicorn

from arithmetic_api.common.logger import configure_logger, logger
from arithmetic_api.server.app import create_app
from arithmetic_api.server.config import ServerConfig


class ArithmeticServer(BaseModel):
    """
    HTTP server answering arithmetic requests.

    Features:
        - Six direct two-operand endpoints under /api/<operator>.
        - Expression-tree evaluation on POST /api/calculate.
        - Optional static file hosting for a browser front end.
        - Each request is evaluated independently; no state is shared.
    """

    # Make the Pydantic instance immutable (read-only) once the server is configured
    model_config = ConfigDict(frozen=True)

    config: ServerConfig = Field(default_factory=ServerConfig, description="Server settings")

    def start(self) -> None:
        """
        Build the application and serve it until the process is stopped.

        :return: None
        """
        configure_logger(self.config.log_level)
        logger.info(f"🖥️ Starting server on http://{self.config.host}:{self.config.port}")

        uvicorn.run(
            create_app(self.config),
            host=str(self.config.host),
            port=self.config.port,
            log_level=self.config.log_level.lower(),
        )

        logger.info("🖥️ Server stopped")
