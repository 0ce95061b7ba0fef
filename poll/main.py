import logging

import uvicorn
from poll.api.api_run import app
from poll.utilities.config import APP_HOST, APP_PORT, DEBUG, POLL_BACKEND
from poll.utilities.network import share_urls


def main():
    logging.basicConfig(
        level=logging.DEBUG if DEBUG else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    urls = share_urls(APP_PORT)
    # Print a friendly message that points to the URL you can open in a browser
    print(f"Availability poll ({POLL_BACKEND} backend) running on {urls[0]} (Press CTRL+C to quit)")
    # Also show the LAN-accessible URL for other participants on the same network
    for url in urls[1:]:
        print(f"Accessible from other devices at: {url}")
    uvicorn.run(app, host=APP_HOST, port=APP_PORT)


if __name__ == "__main__":
    main()
