from __future__ import annotations

from unittest.mock import patch

from futsal import __main__ as entrypoint
from futsal import settings


def test_run_serves_the_app_module():
    with patch("futsal.__main__.uvicorn.run") as mock_run:
        entrypoint.run()
    mock_run.assert_called_once_with(
        "futsal.main:app", host=settings.HOST, port=settings.PORT, log_level="info"
    )
