import os

# keep test runs off Firebase and out of app.log
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("LOG_FILE", "")
