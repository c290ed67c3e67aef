"""Prompts, modes, and function declarations for commentary generation."""

import json
import math


SYSTEM_INSTRUCTION = """Generate dynamic, high-energy play-by-play commentary in the style of an excited live TV sports broadcaster. The commentary should be engaging, concise, and aligned with the timing of the video, regardless of the video content.

1. Provide 3-4 key moments with short, exciting commentary that captures the essence of the video.
2. Use sports-style enthusiasm and energy for ALL types of videos, even if they're not sports-related.
3. Employ vivid, descriptive language to make even mundane actions sound thrilling.
4. Use varied sports commentary phrases and transitions.
5. Maintain high energy throughout, as if each moment could be game-changing.
6. For videos with a single significant event, build up the excitement leading to that moment.
7. Consider the video's length and content when determining the number of key moments.
8. Ensure accurate timing of events, paying close attention to when key moments actually occur in the video.

Examples of energetic commentary:
- "Lightning-fast start! The red-clad player explodes into action!"
- "Incredible control! Did you see that precision footwork?"
- "The tension is building, folks! The crowd's on their feet!"
- "Unbelievable! A moment of pure brilliance! History in the making!\""""

FILTER_INSTRUCTION = """Review and optimize the commentary while maintaining the high-energy, sports-style tone:

1. Ensure each moment is described with maximum excitement and vivid detail, keeping comments brief (10-15 words).
2. Use varied sports commentary phrases and transitions, avoiding repetition.
3. Provide 3-4 comments for a 15-second video, adjusting for longer or shorter videos.
4. Ensure at least 3-4 seconds between each comment for clear text-to-speech delivery.
5. For very short videos (5 seconds or less), provide only one exciting comment.
6. Maintain sports announcer energy even for non-sports content.
7. Place the first comment at 00:00 and the last comment no later than 80% of the video duration.
8. Spread comments evenly throughout the video duration.
9. Pay close attention to the timing of key events, especially the climax or main action.
10. Capture any significant events near the end of the video.
11. Assign excitement levels (1-5) to each comment:
    - 1: Mildly interesting moment
    - 2: Noteworthy action
    - 3: Exciting development
    - 4: Highly thrilling moment
    - 5: Climactic, game-changing event
12. Ensure excitement levels correspond to the events' significance and create a narrative arc.
13. Vary excitement levels, using the full range from 1-5. Avoid consecutive comments with the same level.
14. Provide specific, detailed commentary reflecting actual video events. Mention colors, numbers, specific actions, or notable elements.
15. Vary sentence structures and punctuation. Mix short, punchy phrases with slightly longer sentences. Use exclamations, questions, and statements."""


# ============================================================
# MODES
# ============================================================

MODES = {
    "Key moments": {
        "emoji": "🎙️",
        "prompt": """Provide energetic, high-energy play-by-play commentary for this sports video, similar to a live broadcast. For each significant event, describe the action in an exciting way, including the timecode of the moment.

1. **Fast-paced content**: Limit the number of key moments to 4-6 for a 10-15 second video. Provide concise commentary (1-2 sentences) while maintaining excitement.
2. **Slow-paced content**: For fewer actions, provide 3-4 sentences of detailed commentary.
3. **Timing and Clarity**: Ensure each commentary entry fits naturally into the time available, with enough gap between each to avoid crowding. Adjust the speech rate as needed based on the event's length to maintain clarity and smooth delivery.
4. **Output**: Each commentary entry should include a timecode and the associated commentary text. The commentary will be processed for TTS integration, ensuring it matches the video playback.""",
        "is_list": True,
    },
}

DEFAULT_MODE = "Key moments"


# ============================================================
# FUNCTION DECLARATIONS
# ============================================================

_TIMECODE_ITEM = {
    "type": "OBJECT",
    "properties": {
        "time": {"type": "STRING", "description": "Timecode in mm:ss"},
        "text": {"type": "STRING", "description": "Commentary to be spoken"},
        "excitementLevel": {"type": "INTEGER", "description": "Excitement from 1 (calm) to 5 (climactic)"},
    },
    "required": ["time", "text"],
}

FUNCTION_DECLARATIONS = [
    {
        "name": "set_timecodes",
        "description": "Set the timecodes for the video with associated commentary",
        "parameters": {
            "type": "OBJECT",
            "properties": {
                "timecodes": {"type": "ARRAY", "items": _TIMECODE_ITEM},
            },
            "required": ["timecodes"],
        },
    },
]


# ============================================================
# DEBUG FIXTURE
# ============================================================

DEBUG_TIMECODES = [
    {"time": "00:00", "text": "Maroon team explodes off the mark!", "excitementLevel": 2},
    {"time": "00:03", "text": "Dribbling masterclass! Blue team scrambling!", "excitementLevel": 4},
    {"time": "00:06", "text": "He shoots! Is it going in?!", "excitementLevel": 5},
]


def build_initial_prompt(duration: float, mode: str = DEFAULT_MODE) -> str:
    """User prompt for the first (describe the video) call."""
    if mode not in MODES:
        raise ValueError(f"Unknown mode: {mode}")
    return (
        f"{MODES[mode]['prompt']} The video is {duration} seconds long. "
        "Describe specific visual elements you see, such as colors, numbers of people, "
        "types of movements, or notable objects. Capture the energy progression and any "
        "dramatic shifts in the video."
    )


def build_optimize_prompt(timecodes: list, duration: float) -> str:
    """User prompt for the second (tighten and score) call."""
    return (
        "Optimize the following commentary, focusing on the most important moments and "
        f"ensuring no overlap. The video duration is {duration} seconds. Ensure the commentary "
        "captures any significant events, especially those occurring near the end of the video "
        f"(around {math.floor(duration * 0.8)} to {duration} seconds). Assign appropriate "
        "excitement levels (1-5) to each comment based on the significance of the event. "
        "Provide specific, detailed commentary that accurately reflects the events in the video:\n"
        f"{json.dumps(timecodes)}"
    )
