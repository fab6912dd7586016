from pathlib import Path
import argparse
import os
import sys

# Ensure repo root is on sys.path and is the working directory.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
os.chdir(ROOT)

from shopsync.logging import setup_logging
from shopsync.pipeline.context import SyncJob
from shopsync.pipeline.orchestrator import build_context, build_destination, run_sync

if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="Run one Shopify sync in the foreground.")
    parser.add_argument("--job-id", required=True, help="integration id on the destination")
    parser.add_argument("--account-id", required=True)
    parser.add_argument("--store-url", default=os.getenv("SHOPIFY_STORE_URL"))
    parser.add_argument("--access-token", default=os.getenv("SHOPIFY_ACCESS_TOKEN"))
    parser.add_argument("--callback-url", help="progress callback URL (callback variant)")
    parser.add_argument("--email", help="address for the completion notice")
    args = parser.parse_args()

    setup_logging()
    job = SyncJob(
        job_id=args.job_id,
        account_id=args.account_id,
        config={"accessToken": args.access_token, "storeUrl": args.store_url},
        notify_email=args.email,
    )
    destination = build_destination(progress_callback_url=args.callback_url)
    try:
        run_sync(build_context(job, destination))
    finally:
        destination.close()
    print('Job', job.job_id, 'finished with status', job.status, '| records:', job.total_records)
    sys.exit(0 if job.status == "connected" else 1)
