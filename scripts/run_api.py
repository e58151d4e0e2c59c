import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import uvicorn


def main() -> None:
    host = os.environ.get("API_HOST", "0.0.0.0")
    port = int(os.environ.get("API_PORT", "6901"))
    # TLS is normally terminated in front of the app; these allow serving it directly.
    certfile = os.environ.get("API_SSL_CERTFILE") or None
    keyfile = os.environ.get("API_SSL_KEYFILE") or None
    uvicorn.run(
        "credential_auth.api.server:create_app",
        factory=True,
        host=host,
        port=port,
        reload=False,
        ssl_certfile=certfile,
        ssl_keyfile=keyfile,
    )


if __name__ == "__main__":
    main()
