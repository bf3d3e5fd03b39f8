#!/usr/bin/env python3
"""
Ask running scraper processes to stop gracefully.
Each one finishes its current video and consolidates before exiting.
Use --force if the scraper is stuck and must be killed outright.
"""

import os
import signal
import subprocess
import sys

PROCESS_PATTERNS = ['run_scraper.py', 'channel-transcripts', 'transcript_scraper.main']


def find_scraper_pids():
    """PIDs of running scraper processes (Linux/Mac)."""
    pids = set()
    for pattern in PROCESS_PATTERNS:
        result = subprocess.run(['pgrep', '-f', pattern], capture_output=True, text=True)
        for line in result.stdout.split():
            pid = int(line)
            if pid != os.getpid():
                pids.add(pid)
    return sorted(pids)


def stop_processes(force: bool = False):
    """Send SIGINT (or SIGKILL with force) to every scraper process."""
    if sys.platform == 'win32':
        print("Graceful stop needs POSIX signals; press Ctrl+C in the scraper window instead.")
        return 1

    pids = find_scraper_pids()
    if not pids:
        print("No running scraper found.")
        return 0

    sig = signal.SIGKILL if force else signal.SIGINT
    for pid in pids:
        try:
            os.kill(pid, sig)
            print(f"✓ Sent {sig.name} to {pid}")
        except ProcessLookupError:
            print(f"  Process {pid} already exited")

    if force:
        subprocess.run(['pkill', '-9', '-f', 'chromedriver'],
                       stderr=subprocess.DEVNULL, stdout=subprocess.DEVNULL)
        print("✓ Killed chromedriver processes")
    return 0


if __name__ == '__main__':
    print("=" * 60)
    print("STOP SCRAPER")
    print("=" * 60)

    try:
        sys.exit(stop_processes(force='--force' in sys.argv[1:]))
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)
