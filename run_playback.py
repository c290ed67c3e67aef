"""
Replay a key_moments.json file with synchronized narration.

Simulates video playback in real time and speaks (or, in debug mode,
announces) each key moment as the playhead crosses it.

Usage:
    python run_playback.py key_moments.json
    python run_playback.py key_moments.json --duration 12 --debug
"""

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

# Seconds of tail played after the last key moment when the length is unknown
TAIL_SECONDS = 5.0


def _announce(resource):
    print(f"   🔊 [{resource.index}] {resource.text}")


async def main():
    parser = argparse.ArgumentParser(description="Replay key moments with narration")
    parser.add_argument("session_file", help="key_moments.json produced by run_commentary.py")
    parser.add_argument("--duration", type=float, help="Video length in seconds (probed if omitted)")
    parser.add_argument("--debug", action="store_true", help="Use silent placeholder narration")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    from commentary_pipeline import CommentaryPipeline
    from narration_sync import Fatal, PacedNarrationPlayer, run_time_updates
    from settings import Settings
    from video_validation import probe_duration

    video_path, parsed = load_session(args.session_file)
    if isinstance(parsed, Fatal):
        print(f"❌ {parsed.reason}")
        sys.exit(1)
    if not parsed.entries:
        print("❌ No key moments to play")
        sys.exit(1)

    duration = args.duration
    if duration is None and video_path:
        duration = probe_duration(video_path)
    if duration is None:
        duration = parsed.entries[-1].seconds + TAIL_SECONDS

    settings = Settings.from_env()
    if args.debug:
        settings.debug_mode = True

    pipeline = CommentaryPipeline(settings)
    session = pipeline.build_session(duration, player=PacedNarrationPlayer(on_narrate=_announce))
    session.load_video(video_path or args.session_file, duration)
    session.set_commentary(parsed)

    print("=" * 60)
    print(f"▶️ REPLAYING {len(parsed.entries)} KEY MOMENTS ({duration:.1f}s)")
    print("=" * 60)

    narration = await pipeline.narrate(session)
    if narration.get("error"):
        print(f"⚠️ {narration['error']} - playing without narration")

    sync = session.synchronizer
    sync.start()
    await run_time_updates(sync, sync.video)

    print("\n" + "=" * 60)
    print(f"✅ Played {len(sync.fired)} of {len(parsed.entries)} key moments")
    print("=" * 60)


def load_session(path):
    from narration_sync import load_session_file

    try:
        return load_session_file(path)
    except (OSError, ValueError) as e:
        print(f"❌ Could not read {path}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
