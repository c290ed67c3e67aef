"""
Generate play-by-play commentary for a local video.

Validates the clip, uploads it to Gemini, runs the two-stage commentary
generation, preloads ElevenLabs narration, and writes key_moments.json
next to the video (or into --output-dir).
"""

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

load_dotenv()


async def main():
    parser = argparse.ArgumentParser(
        description="Generate timecoded sports-style commentary for a video",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python run_commentary.py clip.mp4
    python run_commentary.py clip.mp4 --output-dir out/
    python run_commentary.py clip.mp4 --debug --no-narration
        """,
    )
    parser.add_argument("video", help="Path to the video file")
    parser.add_argument("--output-dir", "-o", help="Where to write key_moments.json")
    parser.add_argument("--no-narration", action="store_true", help="Skip text-to-speech preloading")
    parser.add_argument("--debug", action="store_true", help="Use fixed commentary and silent narration")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    # Import after loading env vars
    from commentary_pipeline import CommentaryPipeline
    from settings import Settings

    settings = Settings.from_env()
    if args.debug:
        settings.debug_mode = True

    pipeline = CommentaryPipeline(settings)
    result = await pipeline.run(args.video, output_dir=args.output_dir, narrate=not args.no_narration)

    if result.get("error"):
        print(f"\n❌ {result['error']}")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("✅ COMMENTARY READY")
    print("=" * 60)
    for entry in result["timecodeList"]:
        level = entry.get("excitementLevel")
        suffix = f" (Excitement Level: {level})" if level else ""
        print(f"   {entry['time']}  {entry['text']}{suffix}")


if __name__ == "__main__":
    asyncio.run(main())
