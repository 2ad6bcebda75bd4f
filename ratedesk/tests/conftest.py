import os

# Settings are required at import time by the app; tests never reach a real project.
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service.key")
os.environ.setdefault("JWT_SECRET", "test-secret")
