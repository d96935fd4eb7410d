import logging

import uvicorn

from dispenser.api.api_run import create_app
from dispenser.utilities.config import APP_HOST, APP_PORT, LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = create_app()


if __name__ == "__main__":
    local_url = f"http://localhost:{APP_PORT}"
    # Devices on the LAN reach the service through APP_HOST
    print(f"Uvicorn running on {local_url} (Press CTRL+C to quit)")
    uvicorn.run(app, host=APP_HOST, port=APP_PORT)
