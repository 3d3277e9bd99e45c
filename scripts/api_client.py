"""Lightweight REST client for the sideline API."""

from __future__ import annotations

import argparse
import json
import mimetypes
from pathlib import Path

import httpx


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the sideline REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("session_id", nargs="?", help="Session to upload to or inspect")
    parser.add_argument("clip", type=Path, nargs="?", help="Video clip to analyze")
    parser.add_argument("--message", default=None, help="Coach's note sent with the clip")
    parser.add_argument("--owner", default=None, help="Owner recorded on new sessions")
    parser.add_argument("--list-sessions", action="store_true", help="List recent sessions and exit")
    parser.add_argument("--roster", action="store_true", help="Print the session roster and exit")
    parser.add_argument("--clips", action="store_true", help="Print the session clip library and exit")
    parser.add_argument("--timeout", type=float, default=300.0, help="Request timeout in seconds")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url, timeout=args.timeout) as client:
        if args.list_sessions:
            resp = client.get("/sessions", params={"owner": args.owner} if args.owner else None)
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return

        if args.session_id is None:
            raise SystemExit("session_id is required unless using --list-sessions")

        if args.roster or args.clips:
            path = "roster" if args.roster else "clips"
            resp = client.get(f"/sessions/{args.session_id}/{path}")
            if resp.status_code == 404:
                raise SystemExit(f"session {args.session_id} not found")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return

        if args.clip is None:
            raise SystemExit("clip is required to analyze")

        mime_type = mimetypes.guess_type(args.clip.name)[0] or "video/mp4"
        files = {"clip": (args.clip.name, args.clip.read_bytes(), mime_type)}
        data = {key: value for key, value in {"message": args.message, "owner": args.owner}.items() if value}
        resp = client.post(f"/sessions/{args.session_id}/clips", files=files, data=data)
        if resp.status_code == 502:
            raise SystemExit(f"analysis failed: {resp.json().get('detail')}")
        resp.raise_for_status()
        payload = resp.json()
        print(f"Answered by {payload['candidate_id']} (interpreted={payload['interpreted']})")
        print(json.dumps(payload["report"], indent=2))
        print(f"Roster now tracks {len(payload['roster'])} player(s)")


if __name__ == "__main__":
    main()
