"""Container entrypoint: reads PORT and starts the proxy under uvicorn."""
import os

import uvicorn

port = int(os.environ.get("PORT", 3000))
print(f"Starting HTML Emailer proxy on port {port}", flush=True)

uvicorn.run(
    "htmlemailer.web.app:create_app",
    host="0.0.0.0",
    port=port,
    factory=True,
    log_level=os.environ.get("HTMLEMAILER_LOG_LEVEL", "info").lower(),
)
