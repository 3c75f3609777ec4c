"""Run the gateway with uvicorn on the configured port."""

import uvicorn

from sizyx.core.config import settings


def main() -> None:
    uvicorn.run("sizyx.main:app", host="0.0.0.0", port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
