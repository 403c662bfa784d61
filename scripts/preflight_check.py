#!/usr/bin/env python3
import sys
import os

print("Running preflight check...")
try:
    # Set dummy env vars so config load succeeds without a .env file
    os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
    os.environ.setdefault("ACCESS_TOKEN_SECRET", "preflight-only")

    import nogod.main
    print("Import nogod.main: OK")

    from nogod.store.redis_conn import get_redis
    get_redis().ping()
    print("Redis ping: OK")

    print("Preflight check passed.")
    sys.exit(0)
except Exception as e:
    print(f"Preflight check FAILED: {e}")
    import traceback
    traceback.print_exc()
    sys.exit(1)
