"""Run the API with uvicorn: python -m app"""

import os

import uvicorn

HOST = os.getenv("HOST", "127.0.0.1")  # bind to localhost, expose through a reverse proxy
PORT = int(os.getenv("PORT", "3000"))


def main():
    uvicorn.run("app.main:app", host=HOST, port=PORT, proxy_headers=True)


if __name__ == "__main__":
    main()
