import logging
import os
import sys

import uvicorn

if __name__ == "__main__":
    # Ensure usage of the current directory for imports
    sys.path.append(os.path.dirname(os.path.abspath(__file__)))

    from booking_calendar.config.settings import settings

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.getenv("PORT", "3000"))
    print(f"🚀 Starting {settings.APP_NAME} on http://localhost:{port}")
    uvicorn.run("booking_calendar.main:app", host="0.0.0.0", port=port, reload=settings.DEBUG)
