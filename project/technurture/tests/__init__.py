# Test runs use the in-memory backend, fixed secrets and a throwaway log dir.
import os
import tempfile

os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="technurture-log-"))
os.environ.setdefault("LOG_PRINT", "0")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("ENCRYPTION_KEY", "00" * 32)
os.environ["MONGODB_URI"] = ""
os.environ["DATABASE_URL"] = ""
os.environ.pop("CLOUDINARY_CLOUD_NAME", None)
