"""Send synthetic metrics to a running ingestion service.

Run with:
    python -m cloudwatchr &
    python examples/send_metrics.py --count 50 --batch 10
"""

import argparse
import random
import time
from datetime import UTC, datetime

import httpx

SERVICES = ["user-service", "order-service", "payment-service"]
ENDPOINTS = ["/api/users/123", "/api/orders", "/api/payments/charge"]
STATUS_CODES = [200, 200, 200, 201, 204, 400, 404, 500, 503]


def random_metric() -> dict:
    now = datetime.now(UTC).isoformat(timespec="milliseconds")
    return {
        "serviceName": random.choice(SERVICES),
        "endpoint": random.choice(ENDPOINTS),
        "timestamp": now.replace("+00:00", "Z"),
        "latencyMs": random.randint(1, 800),
        "statusCode": random.choice(STATUS_CODES),
        "region": random.choice(["us-east-1", "eu-west-1"]),
        "method": random.choice(["GET", "POST"]),
    }


def send(base_url: str, count: int, batch: int, rate: float | None) -> None:
    sent = ok = fail = 0
    with httpx.Client(base_url=base_url.rstrip("/"), timeout=10) as client:
        while sent < count:
            size = min(batch, count - sent)
            if size > 1:
                batch = [random_metric() for _ in range(size)]
                response = client.post("/api/metrics/batch", json=batch)
            else:
                response = client.post("/api/metrics", json=random_metric())
            sent += size
            if response.status_code == 201:
                ok += size
            else:
                fail += size
                print("POST failed:", response.status_code, response.text[:200])
            if rate:
                time.sleep(1.0 / rate)

        stats = client.get("/api/metrics/stats").json()

    print(f"Done. Sent={sent} OK={ok} Fail={fail}")
    print(
        f"Server stats: total={stats['totalIngested']} "
        f"stored={stats['currentlyStored']}"
    )


if __name__ == "__main__":
    ap = argparse.ArgumentParser(description="Send synthetic metrics to /api/metrics")
    ap.add_argument("--base", default="http://127.0.0.1:8081", help="service base URL")
    ap.add_argument("--count", type=int, default=20, help="number of metrics to send")
    ap.add_argument("--batch", type=int, default=1, help="metrics per request")
    ap.add_argument(
        "--rate", type=float, default=0, help="requests per second; 0 for no limit"
    )
    args = ap.parse_args()
    send(args.base, args.count, max(args.batch, 1), args.rate or None)
