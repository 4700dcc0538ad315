#!/usr/bin/env python3
"""
End-to-end demo for bucketfile against a live MinIO/S3 endpoint.

Prerequisites:
    1. MinIO running, e.g.: docker run -p 9000:9000 minio/minio server /data
    2. S3_ENDPOINT, S3_ACCESS_KEY and S3_SECRET_KEY set in the environment or .env

Usage:
    python scripts/e2e_demo.py

    # Upload a specific file:
    python scripts/e2e_demo.py --file path/to/file.bin --bucket demo

    # Output the listing as JSON:
    python scripts/e2e_demo.py --json
"""

import argparse
import io
import json
import sys
import time
from pathlib import Path

from bucketfile import StorageError, fetch, list_names, upload
from bucketfile.core.logging import setup_logging
from bucketfile.storage.deadline import Deadline
from bucketfile.storage.factory import build_backend

DEFAULT_BUCKET = "bucketfile-demo"
DEFAULT_PAYLOAD = b"hello from bucketfile\n" * 1024


def ensure_bucket(bucket: str) -> None:
    """Create the demo bucket when missing."""
    backend = build_backend()
    client = backend.connect(Deadline(10))
    try:
        client.ensure_bucket(bucket)
    finally:
        client.close()


def main():
    parser = argparse.ArgumentParser(description="E2E demo for bucketfile")
    parser.add_argument("--file", "-f", type=Path, help="File to upload")
    parser.add_argument("--bucket", "-b", default=DEFAULT_BUCKET, help="Bucket to use")
    parser.add_argument("--json", action="store_true", help="Output listing as JSON")
    args = parser.parse_args()

    setup_logging()

    if args.file and not args.file.exists():
        print(f"Error: file not found: {args.file}")
        sys.exit(1)

    object_name = args.file.name if args.file else f"demo-{int(time.time())}.txt"

    print("=" * 60)
    print("BUCKETFILE - E2E DEMO")
    print("=" * 60)

    # Step 1: Bucket
    print(f"\n[1/4] Ensuring bucket {args.bucket!r} exists...")
    try:
        ensure_bucket(args.bucket)
    except Exception as e:
        print(f"  Error: {e}")
        sys.exit(1)
    print("  Bucket ready")

    # Step 2: Upload
    print(f"\n[2/4] Uploading {object_name}...")
    try:
        if args.file:
            with open(args.file, "rb") as f:
                upload(f, args.bucket, object_name)
            expected = args.file.read_bytes()
        else:
            upload(io.BytesIO(DEFAULT_PAYLOAD), args.bucket, object_name)
            expected = DEFAULT_PAYLOAD
    except StorageError as e:
        print(f"  Error uploading ({e.step}): {e}")
        sys.exit(1)
    print(f"  Uploaded {len(expected)} bytes")

    # Step 3: Fetch
    print(f"\n[3/4] Fetching {object_name}...")
    try:
        data = fetch(args.bucket, object_name)
    except StorageError as e:
        print(f"  Error fetching ({e.step}): {e}")
        sys.exit(1)
    if data != expected:
        print(f"  Error: fetched {len(data)} bytes, content differs from upload")
        sys.exit(1)
    print(f"  Round trip OK ({len(data)} bytes)")

    # Step 4: List
    print(f"\n[4/4] Listing {args.bucket!r}...")
    try:
        names = list_names(args.bucket)
    except StorageError as e:
        print(f"  Error listing ({e.step}): {e}")
        print(f"  Partial listing: {getattr(e, 'partial', [])}")
        sys.exit(1)
    print(f"  {len(names)} objects")
    if object_name not in names:
        print(f"  Error: {object_name} missing from listing")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("ALL OPERATIONS SUCCEEDED")
    print("=" * 60)

    if args.json:
        print(json.dumps(names, indent=2))
    else:
        for name in names:
            print(f"  {name}")

    sys.exit(0)


if __name__ == "__main__":
    main()
