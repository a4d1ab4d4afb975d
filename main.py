import uvicorn

from fintrack.core.config import settings
from fintrack.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
