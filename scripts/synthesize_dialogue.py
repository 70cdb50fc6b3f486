#!/usr/bin/env python3
"""
Send a dialogue script to a running document analyzer and save the MP3.

The script file uses one turn per line, e.g.:

    HOST: Welcome to the show.
    GUEST: Thanks for having me.

"Speaker 1:" / "**Speaker 2:**" labels work as well.
"""
import argparse
import logging
import sys
from pathlib import Path

import requests

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
logger = logging.getLogger("synthesize_dialogue")


def synthesize(base_url: str, dialogue: str, registered: bool, timeout: int) -> bytes:
    url = base_url.rstrip("/") + "/tts/dialogue"
    response = requests.post(
        url,
        json={"dialogue": dialogue, "registered": registered},
        timeout=timeout,
    )
    if response.status_code != 200:
        try:
            detail = response.json().get("detail")
        except ValueError:
            detail = response.text
        raise RuntimeError(f"{url} returned {response.status_code}: {detail}")
    return response.content


def main():
    parser = argparse.ArgumentParser(description="Synthesize a dialogue script to MP3")
    parser.add_argument("script", help="Path to the dialogue text file")
    parser.add_argument("-o", "--output", help="Output MP3 path (default: <script>.mp3)")
    parser.add_argument("--base-url", default="http://localhost:8000", help="Document analyzer base URL")
    parser.add_argument("--preview", action="store_true", help="Request the unregistered-user preview")
    parser.add_argument("--timeout", type=int, default=600, help="Request timeout in seconds")
    args = parser.parse_args()

    script_path = Path(args.script)
    if not script_path.exists():
        logger.error(f"Script not found: {script_path}")
        sys.exit(1)

    output = Path(args.output) if args.output else script_path.with_suffix(".mp3")
    dialogue = script_path.read_text(encoding="utf-8")
    logger.info(f"Synthesizing {script_path} ({len(dialogue)} chars) via {args.base_url}")

    try:
        audio = synthesize(args.base_url, dialogue, registered=not args.preview, timeout=args.timeout)
    except (requests.RequestException, RuntimeError) as e:
        logger.error(f"Synthesis failed: {e}")
        sys.exit(1)

    output.write_bytes(audio)
    logger.info(f"Wrote {len(audio)} bytes to {output}")


if __name__ == "__main__":
    main()
