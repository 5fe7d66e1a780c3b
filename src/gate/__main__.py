# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""gate entrypoint.

Run with:
  python -m gate
"""

import os
import uvicorn

def main() -> None:
    host = os.getenv("GATE_HOST", "127.0.0.1")
    port = int(os.getenv("GATE_PORT", "3000"))
    reload = os.getenv("GATE_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    uvicorn.run("gate.app:create_app", factory=True, host=host, port=port, reload=reload)

if __name__ == "__main__":
    main()
