"""
Run the back office API.
Usage: python run.py   (from the repository root)
"""
import uvicorn

from mfi_backoffice.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "mfi_backoffice.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )
