import uvicorn

from productivity_timer import app
from productivity_timer.config import settings


if __name__ == "__main__":
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
