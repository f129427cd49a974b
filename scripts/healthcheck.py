#!/usr/bin/env python3
"""TripGo Health Check — verify the API is up and serving a tenant.

Checks:
  1. Backend API responds on /api/v1/health (HTTP 200, status "healthy")
  2. The default (or requested) tenant resolves on /api/v1/tenants/current
  3. The public catalogue answers on /api/v1/cruises

Usage:
    python scripts/healthcheck.py                                  # check http://localhost:8000
    python scripts/healthcheck.py --url https://api.tripgo.example
    python scripts/healthcheck.py --tenant acme-travel --json      # machine-readable output

Exit codes:
    0 = all checks passed
    1 = one or more checks failed
    2 = critical failure (cannot reach target at all)
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone
from typing import Optional

import httpx

# ══════════════════════════════════════════════════════════════════════
# Check result model
# ══════════════════════════════════════════════════════════════════════


class CheckResult:
    """Single health check result."""

    def __init__(self, name: str, passed: bool, message: str,
                 detail: str = "", severity: str = "error"):
        self.name = name
        self.passed = passed
        self.message = message
        self.detail = detail
        self.severity = severity  # "error", "warning", "info"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "passed": self.passed,
            "message": self.message,
            "detail": self.detail,
            "severity": self.severity,
        }

    def __str__(self) -> str:
        icon = "✅" if self.passed else ("⚠️" if self.severity == "warning" else "❌")
        s = f"{icon} {self.name}: {self.message}"
        if self.detail:
            s += f"\n     {self.detail}"
        return s


# ══════════════════════════════════════════════════════════════════════
# Health checks
# ══════════════════════════════════════════════════════════════════════

def check_backend_health(client: httpx.Client) -> CheckResult:
    """Check that /api/v1/health responds with status "healthy"."""
    try:
        resp = client.get("/api/v1/health")
    except httpx.ConnectError as e:
        return CheckResult("Backend API", False, "Cannot connect to backend", str(e))
    except httpx.HTTPError as e:
        return CheckResult(
            "Backend API", False,
            f"Health check failed: {type(e).__name__}",
            str(e),
        )

    if resp.status_code != 200:
        return CheckResult(
            "Backend API", False,
            f"HTTP {resp.status_code} (expected 200)",
            f"URL: {resp.url}",
        )

    body = resp.json()
    if body.get("status") != "healthy":
        return CheckResult(
            "Backend API", False,
            f"Status: {body.get('status', 'missing')} (expected 'healthy')",
            f"Response: {json.dumps(body)}",
        )

    return CheckResult(
        "Backend API", True,
        f"Healthy (v{body.get('version', 'unknown')}, {body.get('environment', 'unknown')})",
        f"URL: {resp.url}",
    )


def check_tenant(client: httpx.Client, tenant: Optional[str]) -> CheckResult:
    """Check that tenant resolution returns an active tenant."""
    headers = {"X-Tenant-ID": tenant} if tenant else {}
    try:
        resp = client.get("/api/v1/tenants/current", headers=headers)
    except httpx.HTTPError as e:
        return CheckResult("Tenant", False, f"Request failed: {type(e).__name__}", str(e))

    if resp.status_code != 200:
        return CheckResult(
            "Tenant", False,
            f"HTTP {resp.status_code} resolving tenant {tenant or '(default)'}",
            resp.text[:200],
        )

    data = resp.json().get("data") or {}
    return CheckResult(
        "Tenant", True,
        f"Resolved {data.get('slug', '?')} ({data.get('name', '?')})",
    )


def check_catalog(client: httpx.Client, tenant: Optional[str]) -> CheckResult:
    """Check that the public cruise listing answers; an empty catalogue is a warning."""
    headers = {"X-Tenant-ID": tenant} if tenant else {}
    try:
        resp = client.get("/api/v1/cruises", params={"limit": 1}, headers=headers)
    except httpx.HTTPError as e:
        return CheckResult("Catalogue", False, f"Request failed: {type(e).__name__}", str(e))

    if resp.status_code != 200:
        return CheckResult("Catalogue", False, f"HTTP {resp.status_code}", resp.text[:200])

    total = ((resp.json().get("data") or {}).get("pagination") or {}).get("total", 0)
    if total == 0:
        return CheckResult(
            "Catalogue", True,
            "No cruises published yet",
            "Seed demo data with: python scripts/seed_demo.py",
            severity="warning",
        )
    return CheckResult("Catalogue", True, f"{total} cruises listed")


# ══════════════════════════════════════════════════════════════════════
# Runner
# ══════════════════════════════════════════════════════════════════════

def run_healthcheck(
    url: str = "http://localhost:8000",
    tenant: Optional[str] = None,
    timeout: int = 10,
) -> list[CheckResult]:
    """Run all health checks and return results."""
    with httpx.Client(base_url=url.rstrip("/"), timeout=timeout) as client:
        results = [check_backend_health(client)]
        if not results[0].passed:
            return results
        results.append(check_tenant(client, tenant))
        results.append(check_catalog(client, tenant))
    return results


def main():
    parser = argparse.ArgumentParser(
        description="TripGo Health Check",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/healthcheck.py                              # full check
  python scripts/healthcheck.py --url https://api.tripgo.example --tenant acme-travel
  python scripts/healthcheck.py --json                       # JSON output
""",
    )
    parser.add_argument("--url", type=str, default="http://localhost:8000",
                        help="Base URL to check (default: http://localhost:8000)")
    parser.add_argument("--tenant", type=str, default=None,
                        help="Tenant slug sent as X-Tenant-ID (default: server default)")
    parser.add_argument("--json", dest="output_json", action="store_true",
                        help="Output results as JSON")
    parser.add_argument("--timeout", type=int, default=10,
                        help="HTTP timeout in seconds (default: 10)")
    args = parser.parse_args()

    now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")

    if not args.output_json:
        print(f"""
{'=' * 60}
  TRIPGO — HEALTH CHECK
  Target : {args.url}
  Time   : {now}
{'=' * 60}
""")

    results = run_healthcheck(url=args.url, tenant=args.tenant, timeout=args.timeout)

    if args.output_json:
        output = {
            "timestamp": now,
            "target": args.url,
            "checks": [r.to_dict() for r in results],
            "all_passed": all(r.passed for r in results),
            "summary": {
                "total": len(results),
                "passed": sum(1 for r in results if r.passed),
                "failed": sum(1 for r in results if not r.passed),
                "warnings": sum(1 for r in results if r.severity == "warning"),
            },
        }
        print(json.dumps(output, indent=2))
    else:
        for result in results:
            print(result)
            print()

        failed = sum(1 for r in results if not r.passed)
        warnings = sum(1 for r in results if r.passed and r.severity == "warning")
        total = len(results)

        print(f"{'=' * 60}")
        if failed == 0:
            print(f"  ✅ ALL {total} CHECKS PASSED", end="")
            print(f" ({warnings} warnings)" if warnings else "")
        else:
            print(f"  ❌ {failed}/{total} CHECKS FAILED")
        print(f"{'=' * 60}")

    if len(results) == 1 and not results[0].passed:
        sys.exit(2)
    if any(not r.passed for r in results):
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    main()
