import uvicorn

from futsal import settings


def run() -> None:
    uvicorn.run("futsal.main:app", host=settings.HOST, port=settings.PORT, log_level="info")


if __name__ == "__main__":
    run()
