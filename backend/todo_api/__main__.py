import uvicorn
from todo_api.core.config import settings
from todo_api.core.logging_setup import setup_logging


def run() -> None:
    setup_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "todo_api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_config=None,
    )


if __name__ == "__main__":
    run()
