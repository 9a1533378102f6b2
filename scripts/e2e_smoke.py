#!/usr/bin/env python3
"""End-to-end smoke for the OrgDesk RPC API.

Walks the organization → LMS → course → module → lesson path and the notes
folder tree against a running backend, and fails fast on regressions.
"""

from __future__ import annotations

import json
import sys
import uuid
from dataclasses import dataclass

import httpx

BASE_URL = "http://127.0.0.1:2022"
TIMEOUT = 30.0


@dataclass
class SmokeState:
    organization_id: int | None = None
    user_id: int | None = None
    module_id: int | None = None
    root_folder_id: int | None = None


def expect(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


def call(client: httpx.Client, operation: str, payload: dict | None = None, expected: int = 200):
    resp = client.post(f"{BASE_URL}/api/rpc/{operation}", json=payload or {})
    expect(resp.status_code == expected, f"{operation} -> {resp.status_code} != {expected}; body={resp.text[:500]}")
    return resp.json()


def query(client: httpx.Client, operation: str, payload: dict | None = None):
    resp = client.get(f"{BASE_URL}/api/rpc/{operation}", params={"input": json.dumps(payload or {})})
    expect(resp.status_code == 200, f"GET {operation} -> {resp.status_code}; body={resp.text[:500]}")
    return resp.json()


def main() -> int:
    state = SmokeState()
    suffix = uuid.uuid4().hex[:8]
    with httpx.Client(timeout=TIMEOUT) as client:
        # 1) Health
        health = client.get(f"{BASE_URL}/api/health").json()
        expect(health.get("status") == "healthy", "health status is not healthy")
        expect(query(client, "healthcheck").get("status") == "ok", "rpc healthcheck failed")

        # 2) Tenant and creator
        org = call(client, "createOrganization", {"name": "Acme", "slug": f"acme-{suffix}", "description": None})
        state.organization_id = org["id"]
        user = call(client, "createUser", {"email": f"smoke-{suffix}@example.com", "name": "Smoke", "password": "secret123"})
        state.user_id = user["id"]
        call(client, "createOrganizationUser", {"organization_id": state.organization_id, "user_id": state.user_id, "role": "owner"})
        dup = call(
            client,
            "createOrganizationUser",
            {"organization_id": state.organization_id, "user_id": state.user_id, "role": "member"},
            expected=409,
        )
        expect(dup["error"]["code"] == "duplicate_membership", "duplicate membership not rejected")

        # 3) LMS path
        lms = call(client, "createLmsInstance", {"organization_id": state.organization_id, "name": "Training", "slug": "training", "description": None})
        course = call(
            client,
            "createCourse",
            {
                "lms_instance_id": lms["id"],
                "title": "Intro",
                "slug": "intro",
                "description": None,
                "content": None,
                "visibility": "public",
                "created_by": state.user_id,
            },
        )
        module = call(client, "createModule", {"course_id": course["id"], "title": "M1", "slug": "m1", "description": None, "order_index": 0})
        state.module_id = module["id"]
        lesson = call(client, "createLesson", {"module_id": state.module_id, "title": "L1", "slug": "l1", "content": None, "order_index": 0})
        lessons = query(client, "getLessons", {"moduleId": state.module_id})
        expect([item["id"] for item in lessons] == [lesson["id"]], "lesson listing mismatch")

        # 4) Notes tree
        root = call(client, "createNotesFolder", {"organization_id": state.organization_id, "parent_id": None, "name": "Root", "created_by": state.user_id})
        state.root_folder_id = root["id"]
        child = call(client, "createNotesFolder", {"organization_id": state.organization_id, "parent_id": state.root_folder_id, "name": "Child", "created_by": state.user_id})
        roots = query(client, "getNotesFolders", {"organizationId": state.organization_id, "parentId": None})
        children = query(client, "getNotesFolders", {"organizationId": state.organization_id, "parentId": state.root_folder_id})
        expect([f["id"] for f in roots] == [root["id"]], "root folder listing mismatch")
        expect([f["id"] for f in children] == [child["id"]], "child folder listing mismatch")

        # 5) Negative test sanity
        missing = call(client, "createLesson", {"module_id": 999999999, "title": "x", "slug": "x", "content": None, "order_index": 0}, expected=404)
        expect(missing["error"]["code"] == "not_found", "missing module not reported as not_found")

    print(json.dumps({"ok": True, "message": "OrgDesk smoke passed"}))
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as exc:  # noqa: BLE001
        print(json.dumps({"ok": False, "error": str(exc)}))
        sys.exit(1)
