"""Shared helpers for the live-server check scripts.

UTF-8 terminal fix, thin JSON API calls against a running server, and a
CheckList that accumulates named checks and prints a summary.
"""
from __future__ import annotations

import io
import sys
from dataclasses import dataclass
from typing import Optional

import httpx

# ---------------------------------------------------------------------------
# 1) UTF-8 terminal fix (Windows consoles default to a legacy code page)
# ---------------------------------------------------------------------------

def ensure_utf8() -> None:
    """Force stdout/stderr to UTF-8 on Windows terminals."""
    if sys.stdout.encoding != "utf-8":
        sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")
    if sys.stderr.encoding != "utf-8":
        sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding="utf-8", errors="replace")


# ---------------------------------------------------------------------------
# 2) API helpers
# ---------------------------------------------------------------------------

DEFAULT_BASE = "http://127.0.0.1:8000"
DEFAULT_TIMEOUT = 30


def auth_headers(token: Optional[str]) -> dict:
    return {"Authorization": f"Bearer {token}"} if token else {}


def login(client: httpx.Client, username: str, password: str) -> Optional[str]:
    """POST /api/login and return the access token, or None on failure."""
    r = client.post("/api/login", json={"username": username, "password": password})
    if r.status_code != 200:
        return None
    return r.json().get("accessToken")


def register_or_login(client: httpx.Client, username: str, password: str) -> Optional[str]:
    """Register *username*; if it already exists, log in instead."""
    r = client.post("/api/register", json={"username": username, "password": password})
    if r.status_code == 201:
        return r.json().get("accessToken")
    return login(client, username, password)


# ---------------------------------------------------------------------------
# 3) CheckList: named checks grouped by section, summary at the end
# ---------------------------------------------------------------------------

@dataclass
class _Check:
    section: str
    name: str
    passed: bool
    detail: str


class CheckList:
    """Collect pass/fail checks per section and report the failures at the end.

    Usage::

        cl = CheckList()
        cl.section("auth")
        cl.check("Login", token is not None)
        cl.summary()           # totals, then failures grouped by section
        sys.exit(cl.exit_code())
    """

    def __init__(self) -> None:
        self._checks: list[_Check] = []
        self._section = "general"

    def section(self, title: str) -> None:
        self._section = title
        print(f"\n--- {title} ---")

    def check(self, name: str, condition: bool, detail: str = "") -> bool:
        ok = bool(condition)
        self._checks.append(_Check(self._section, name, ok, detail))
        print(f"  [{'OK' if ok else 'FAIL'}] {name}")
        if detail:
            print(f"         {detail}")
        return ok

    def failures(self) -> dict[str, list[_Check]]:
        grouped: dict[str, list[_Check]] = {}
        for c in self._checks:
            if not c.passed:
                grouped.setdefault(c.section, []).append(c)
        return grouped

    def summary(self, label: str = "TOTAL") -> None:
        passed = sum(1 for c in self._checks if c.passed)
        total = len(self._checks)
        pct = round(passed / total * 100) if total else 0
        print(f"\n{label}: {passed}/{total} ({pct}%)")
        for section, failed in self.failures().items():
            print(f"\n{section}: {len(failed)} failed")
            for c in failed:
                print(f"  - {c.name}" + (f" ({c.detail})" if c.detail else ""))

    def exit_code(self) -> int:
        return 1 if self.failures() else 0
