import os

host = os.getenv("HOST", "0.0.0.0")
port = os.getenv("PORT", "5010")
bind = f"{host}:{port}"

# One worker: the daily scheduler lives in-process and must not be duplicated.
# The distribution lock would still block a second send, but the extra
# worker would just log skipped runs.
workers = 1
worker_class = "uvicorn.workers.UvicornWorker"
keepalive = 120
# A full cohort run can take a while when triggered over HTTP
timeout = int(os.getenv("TIMEOUT", "900"))

loglevel = os.getenv("LOG_LEVEL", "info")
errorlog = "-"
accesslog = "-"
