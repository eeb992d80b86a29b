"""Server run script."""

import uvicorn
from voidloot.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "voidloot.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
