#project.runserver.py

import uvicorn

from src.sitecms.core.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "src.sitecms.main:app",
        host="127.0.0.1",
        port=8000,
        reload=settings.MODE == "development",
        workers=None if settings.MODE == "development" else settings.WEB_CONCURRENCY,
    )
