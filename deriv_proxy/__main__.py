"""Run the proxy with uvicorn on HOST/PORT."""

from __future__ import annotations

import uvicorn

from deriv_proxy.runtime.settings import load_http_settings


def main() -> None:
    http = load_http_settings()
    uvicorn.run("deriv_proxy.server:app", host=http.host, port=http.port)


if __name__ == "__main__":
    main()
