import os

os.environ.setdefault("LOG_LEVEL", "WARNING")
