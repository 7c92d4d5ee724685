"""Closed vocabulary: exact cinematography terms and their categories.

Terms are matched case-insensitively as whole words. A term listed under
two categories is kept only under the first one.
"""

DEFAULT_VOCABULARY: dict[str, list[str]] = {
    "shot.type": [
        "extreme close-up", "extreme close up", "close-up", "close up", "closeup",
        "medium close-up", "medium shot", "medium long shot", "cowboy shot",
        "full shot", "long shot", "wide shot", "extreme wide shot",
        "establishing shot", "two-shot", "two shot", "over-the-shoulder shot",
        "over the shoulder shot", "point of view shot", "pov shot", "insert shot",
        "cutaway", "master shot", "single shot", "reaction shot",
    ],
    "camera.movement": [
        "dolly in", "dolly out", "dolly zoom", "dolly", "tracking shot",
        "tracking", "truck left", "truck right", "pan left", "pan right",
        "whip pan", "pan", "tilt up", "tilt down", "tilt", "crane shot", "crane",
        "boom", "jib", "steadicam", "handheld", "hand-held", "gimbal",
        "drone shot", "drone", "aerial shot", "zoom in", "zoom out",
        "crash zoom", "zoom", "push in", "pull out", "pull back", "arc shot",
        "orbit", "static shot", "locked-off", "roll",
    ],
    "camera.angle": [
        "low angle", "low-angle", "high angle", "high-angle", "eye level",
        "eye-level", "bird's eye view", "birds eye view", "bird's-eye view",
        "worm's eye view", "worms eye view", "overhead", "top-down",
        "dutch angle", "dutch tilt", "canted angle", "over-the-shoulder",
        "point of view", "pov",
    ],
    "camera.lens": [
        "wide-angle lens", "wide angle lens", "telephoto lens", "telephoto",
        "fisheye lens", "fisheye", "anamorphic lens", "anamorphic",
        "macro lens", "prime lens", "zoom lens", "tilt-shift",
    ],
    "camera.focus": [
        "shallow depth of field", "deep depth of field", "deep focus",
        "shallow focus", "rack focus", "soft focus", "selective focus",
        "bokeh", "tack sharp", "out of focus",
    ],
    "lighting.source": [
        "natural light", "sunlight", "moonlight", "candlelight", "firelight",
        "neon lights", "neon light", "street lights", "streetlights",
        "practical lights", "key light", "fill light", "rim light", "backlight",
        "backlit", "softbox", "ring light", "lamplight", "headlights",
    ],
    "lighting.quality": [
        "soft light", "hard light", "diffused light", "harsh light",
        "high-key", "high key", "low-key", "low key", "chiaroscuro",
        "rembrandt lighting", "volumetric light", "volumetric lighting",
        "god rays", "dappled light", "silhouette", "high contrast",
        "low contrast", "moody lighting", "dramatic lighting",
    ],
    "lighting.timeOfDay": [
        "golden hour", "blue hour", "magic hour", "sunrise", "sunset",
        "dawn", "dusk", "twilight", "midday", "high noon", "noon",
        "midnight", "nighttime", "night", "daytime",
    ],
    "style.aesthetic": [
        "film noir", "neo-noir", "cinematic", "documentary style",
        "documentary", "cyberpunk", "steampunk", "vaporwave", "surreal",
        "surrealist", "photorealistic", "hyperrealistic", "minimalist",
        "vintage", "retro", "dreamlike", "gritty", "noir", "anime",
        "stop motion", "claymation", "cel-shaded", "found footage",
        "music video",
    ],
    "style.filmStock": [
        "35mm film", "16mm film", "super 8", "super 16", "8mm film", "70mm film",
        "imax", "kodak portra", "kodak vision3", "kodachrome", "ektachrome",
        "fujifilm", "tri-x", "film grain",
    ],
    "style.colorGrade": [
        "teal and orange", "orange and teal", "desaturated", "monochrome",
        "black and white", "black-and-white", "sepia", "bleach bypass",
        "pastel palette", "muted tones", "warm tones", "cool tones",
        "high saturation", "low saturation", "technicolor",
    ],
    "environment.weather": [
        "rain", "rainy", "heavy rain", "drizzle", "snow", "snowy", "snowfall",
        "fog", "foggy", "mist", "misty", "haze", "hazy", "storm", "stormy",
        "thunderstorm", "overcast", "cloudy", "clear sky", "blizzard", "sandstorm",
    ],
    "environment.location": [
        "forest", "beach", "desert", "city street", "alley", "alleyway",
        "rooftop", "subway", "train station", "warehouse", "kitchen",
        "bedroom", "living room", "office", "diner", "cafe", "café", "bar",
        "nightclub", "mountain", "mountains", "lake", "river", "ocean",
        "meadow", "field", "jungle", "cave", "castle", "spaceship",
        "laboratory", "highway", "parking lot", "library", "market",
    ],
    "audio.score": [
        "orchestral score", "ambient score", "piano score", "synth score",
        "synthwave", "string quartet", "soundtrack",
    ],
    "audio.soundEffect": [
        "footsteps", "thunder", "gunshot", "gunshots", "explosion",
        "door creak", "glass shattering", "sirens", "heartbeat",
    ],
    "audio.ambient": [
        "city ambience", "crowd noise", "birdsong", "wind howling",
        "room tone", "crickets", "traffic noise", "rustling leaves",
    ],
}
