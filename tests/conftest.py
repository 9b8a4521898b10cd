import os
import tempfile

# Point the database and upload directory at a scratch location before the app is imported
_scratch = tempfile.mkdtemp(prefix="invoice-mailer-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_scratch, 'test.db')}")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_scratch, "uploads"))
os.environ.setdefault("BREVO_API_KEY", "test-api-key")
os.environ.setdefault("APP_BASE_URL", "http://testserver")
