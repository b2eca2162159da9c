import os

# The connection provider refuses to import without a URI. Nothing in the
# tests connects to it: the default client is never started.
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.pop("APP_ENV", None)
