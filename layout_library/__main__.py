"""
Run the API server:
  python -m layout_library
Host and port come from HOST / PORT (default 0.0.0.0:5000).
"""

import uvicorn

from layout_library.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "layout_library.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
