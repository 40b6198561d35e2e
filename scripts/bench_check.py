#!/usr/bin/env python3
"""Benchmark authorization checks: latency (p50, p95, p99) and QPS.

Usage:
    export API_URL=http://localhost:8000 BENCH_ORG=org1 BENCH_PRINCIPAL=user-1
    python scripts/bench_check.py [--num-checks 500] [--bulk-size 0]

With ``--bulk-size N`` each request is a bulk check of N pairs.
"""
from __future__ import annotations

import argparse
import os
import statistics
import sys
import time

import httpx


def build_payload(principal_id: str, organization_id: str, i: int, bulk_size: int) -> tuple[str, dict]:
    principal = {"id": principal_id, "type": "user", "organization_id": organization_id}
    resource = f"arn:monkeys:iam:{organization_id}:resource/{i % 50}"
    if bulk_size <= 0:
        return "/v1/authz/check", {"principal": principal, "action": "resource:Read", "resource": resource}
    checks = [
        {"action": "resource:Read" if j % 2 == 0 else "resource:Delete", "resource": resource}
        for j in range(bulk_size)
    ]
    return "/v1/authz/bulk-check", {"principal": principal, "checks": checks}


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark authorization checks")
    parser.add_argument("--num-checks", type=int, default=200, help="Number of requests")
    parser.add_argument("--bulk-size", type=int, default=0, help="Pairs per bulk request (0 = single check)")
    parser.add_argument("--output", type=str, default="/results/bench_check.txt", help="Output file path")
    args = parser.parse_args()

    api_url = os.environ.get("API_URL", "http://localhost:8000").rstrip("/")
    organization_id = os.environ.get("BENCH_ORG", "org1")
    principal_id = os.environ.get("BENCH_PRINCIPAL", "user-1")
    headers = {"Content-Type": "application/json", "X-Organization-Id": organization_id}

    latencies: list[float] = []
    errors = 0
    allowed = 0
    print(f"Running {args.num_checks} requests against {api_url}...")
    start_total = time.perf_counter()
    with httpx.Client(timeout=30.0) as client:
        for i in range(args.num_checks):
            path, payload = build_payload(principal_id, organization_id, i, args.bulk_size)
            t0 = time.perf_counter()
            r = client.post(f"{api_url}{path}", json=payload, headers=headers)
            elapsed = time.perf_counter() - t0
            if r.status_code != 200:
                errors += 1
                continue
            latencies.append(elapsed)
            body = r.json()
            results = body["results"] if "results" in body else [body]
            allowed += sum(1 for item in results if item["allowed"])
    total_elapsed = time.perf_counter() - start_total

    n = len(latencies)
    if n == 0:
        print("No successful checks.")
        return 1

    qps = n / total_elapsed
    p50 = statistics.median(latencies) * 1000
    p95 = sorted(latencies)[int(n * 0.95) - 1] * 1000 if n >= 20 else p50
    p99 = sorted(latencies)[int(n * 0.99) - 1] * 1000 if n >= 100 else p95

    summary = (
        f"Check benchmark (requests={n}, bulk size={args.bulk_size}, errors={errors}, allowed={allowed})\n"
        f"  QPS: {qps:.2f}\n"
        f"  Latency: p50={p50:.1f} ms, p95={p95:.1f} ms, p99={p99:.1f} ms\n"
        f"  Total time: {total_elapsed:.2f} s\n"
    )
    print(summary)

    try:
        os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(summary)
        print(f"Wrote {args.output}")
    except OSError as e:
        print(f"Could not write {args.output}: {e}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
