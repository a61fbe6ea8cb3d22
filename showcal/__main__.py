"""Run the calendar API: ``python -m showcal``."""

import uvicorn

from showcal import config
from showcal.api import create_app

if __name__ == "__main__":
    uvicorn.run(create_app(), host=config.HOST, port=config.PORT)
