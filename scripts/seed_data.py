#!/usr/bin/env python3
"""
Seed script — creates a realistic dataset for exploring the status feed.

Creates:
  • 20 status updates with random moods
  • 1-3 mood changes per update (builds each transition timeline)
  • A review workflow (submitted → in_review → ...) on a third of the updates
  • Some comments, reactions and likes

Run after the API is up:
  python scripts/seed_data.py --api-url http://localhost:8000

All IDs are printed so you can use them in curl commands.
"""
import argparse
import json
import random
import time
import urllib.request
import urllib.error
from dataclasses import dataclass

API_PREFIX = "/api/v1/status_updates"

MOODS = ["focused", "calm", "happy", "blocked"]
REACTIONS = ["👍", "❤️", "😂", "😮", "😢", "🔥"]
ACTORS = ["alice", "bob", "carol", "dave", "eve", "frank"]

# Each path is a plausible review history; transitions follow it in order
REVIEW_PATHS = [
    ["submitted", "in_review", "approved"],
    ["submitted", "in_review", "needs_info", "in_review", "approved"],
    ["submitted", "in_review", "denied"],
    ["submitted", "needs_info"],
]

SAMPLE_UPDATES = [
    "Deep in the parser rewrite, please hold all questions until lunch.",
    "CI is red again. Bisecting the flaky integration suite.",
    "Shipped the timeline endpoint to staging 🚀",
    "Pairing with the design team on the reactions picker.",
    "Waiting on legal review for the new data retention policy.",
    "Finally closed the oldest ticket in the backlog.",
    "Migrations ran cleanly on the replica. Promoting tonight.",
    "On-call handoff done. Quiet week so far.",
    "Writing up the incident review from Tuesday.",
    "Blocked on credentials for the reporting warehouse.",
    "Refactored the pagination helpers; listing is 2x faster.",
    "Reviewing three PRs before standup.",
]

SAMPLE_COMMENTS = [
    "Nice work!",
    "Let me know if you need a second pair of eyes.",
    "Is there a ticket for this?",
    "Ping me when it's on staging.",
    "🎉",
]


@dataclass
class ApiClient:
    base_url: str

    def request(self, method: str, path: str, data: dict | None = None) -> dict:
        url = f"{self.base_url}{path}"
        body = json.dumps(data).encode() if data is not None else None
        req = urllib.request.Request(
            url, data=body, headers={"Content-Type": "application/json"}, method=method
        )
        try:
            with urllib.request.urlopen(req, timeout=10) as resp:
                raw = resp.read()
                return json.loads(raw) if raw else {}
        except urllib.error.HTTPError as e:
            body = e.read().decode()
            print(f"  HTTP {e.code} on {method} {path}: {body}")
            return {}

    def post(self, path: str, data: dict | None = None) -> dict:
        return self.request("POST", path, data)

    def patch(self, path: str, data: dict) -> dict:
        return self.request("PATCH", path, data)

    def get(self, path: str) -> dict:
        return self.request("GET", path)


def wait_for_api(client: ApiClient, retries: int = 15) -> None:
    print(f"Waiting for API at {client.base_url} ...")
    for i in range(retries):
        try:
            result = client.get("/health")
            if result.get("data", {}).get("status") == "ok":
                print("  API is ready!\n")
                return
        except Exception:
            pass
        time.sleep(3)
    raise RuntimeError(f"API not reachable at {client.base_url} after {retries} retries")


def main(api_url: str, count: int) -> None:
    client = ApiClient(api_url)
    wait_for_api(client)

    # ── Create status updates ─────────────────────────────────────────────
    print("Creating status updates...")
    update_ids: list[str] = []
    for i in range(count):
        body = SAMPLE_UPDATES[i % len(SAMPLE_UPDATES)]
        result = client.post(API_PREFIX, {"body": body, "mood": random.choice(MOODS)})
        uid = result.get("data", {}).get("id", "")
        if uid:
            update_ids.append(uid)
            print(f"  ✓ {uid}")
        else:
            print(f"  ✗ Failed to create update {i}")

    if not update_ids:
        print("No status updates created — aborting")
        return

    # ── Mood changes ──────────────────────────────────────────────────────
    print("\nChanging moods...")
    transitions = 0
    for uid in update_ids:
        for _ in range(random.randint(1, 3)):
            client.patch(f"{API_PREFIX}/{uid}", {"mood": random.choice(MOODS)})
            transitions += 1
    print(f"  ✓ {transitions} mood updates sent (no-ops record no transition)")

    # ── Review workflow ───────────────────────────────────────────────────
    print("\nRunning review workflows...")
    reviewed = update_ids[: max(1, len(update_ids) // 3)]
    for uid in reviewed:
        for status in random.choice(REVIEW_PATHS):
            reason = "Requested by reviewer" if status == "needs_info" else None
            client.patch(f"{API_PREFIX}/{uid}", {"status": status, "reason": reason})
    print(f"  ✓ {len(reviewed)} updates reviewed")

    # ── Comments, reactions, likes ────────────────────────────────────────
    print("\nAdding comments, reactions and likes...")
    comments = reactions = likes = 0
    for uid in update_ids:
        for text in random.sample(SAMPLE_COMMENTS, k=random.randint(0, 3)):
            client.post(f"{API_PREFIX}/{uid}/comments", {"body": text})
            comments += 1
        for actor in random.sample(ACTORS, k=random.randint(0, 4)):
            client.post(
                f"{API_PREFIX}/{uid}/reactions",
                {"kind": random.choice(REACTIONS), "actor_identifier": actor},
            )
            reactions += 1
        for _ in range(random.randint(0, 5)):
            client.post(f"{API_PREFIX}/{uid}/like")
            likes += 1
    print(f"  ✓ {comments} comments, {reactions} reactions, {likes} likes added")

    # ── Print summary ─────────────────────────────────────────────────────
    print("\n" + "=" * 60)
    print("Seed complete! Here are some commands to try:\n")
    u = reviewed[0]
    print("# Transition timeline of a reviewed update:")
    print(f"  curl -s '{api_url}{API_PREFIX}/{u}/transitions' | python3 -m json.tool\n")
    print("# Blocked updates, newest first:")
    print(f"  curl -s '{api_url}{API_PREFIX}?mood=blocked&page_size=5' | python3 -m json.tool\n")
    print("# Change a mood:")
    print(f"  curl -s -X PATCH '{api_url}{API_PREFIX}/{u}' \\")
    print("    -H 'Content-Type: application/json' \\")
    print("    -d '{\"mood\": \"happy\"}' | python3 -m json.tool\n")
    print("# Check Jaeger traces: http://localhost:16686")
    print(f"# Check metrics: {api_url}/metrics")
    print("=" * 60)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the Status Feed API")
    parser.add_argument("--api-url", default="http://localhost:8000", help="API base URL")
    parser.add_argument("--count", type=int, default=20, help="Status updates to create")
    args = parser.parse_args()
    main(args.api_url, args.count)
