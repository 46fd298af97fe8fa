import json
import os
import socket
import time

TIMEOUT = int(os.getenv("TIMEOUT_S", "120"))
POSTGRES_HOST = os.getenv("POSTGRES_HOST", "postgres")
POSTGRES_PORT = int(os.getenv("POSTGRES_PORT", "5432"))
REDIS_HOST = os.getenv("REDIS_HOST", "redis")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))


def tcp_ok(host: str, port: int) -> bool:
    try:
        s = socket.create_connection((host, port), timeout=2)
        s.close()
        return True
    except Exception:
        return False


def main() -> int:
    deadline = time.time() + TIMEOUT
    ok_postgres = ok_redis = False
    while time.time() < deadline:
        ok_postgres = tcp_ok(POSTGRES_HOST, POSTGRES_PORT)
        ok_redis = tcp_ok(REDIS_HOST, REDIS_PORT)
        if ok_postgres and ok_redis:
            print(json.dumps({"ready": True, "postgres": ok_postgres, "redis": ok_redis}))
            return 0
        time.sleep(2)
    print(json.dumps({"ready": False, "postgres": ok_postgres, "redis": ok_redis}))
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
