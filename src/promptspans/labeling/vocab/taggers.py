"""Adapter for detections returned by an external NER tagger.

Inference happens elsewhere; this module only maps tagger labels onto
taxonomy categories and rescales scores so that anything the tagger
accepted lands at or above the pipeline's default confidence floor.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

TAGGER_LABEL_MAP: dict[str, str] = {
    # Subjects
    "person": "subject.identity",
    "character": "subject.identity",
    "animal": "subject.identity",
    "creature": "subject.identity",
    "object": "subject.identity",
    "item": "subject.identity",
    "vehicle": "subject.identity",
    "food": "subject.identity",
    "drink": "subject.identity",
    "clothing": "subject.wardrobe",
    # Environment
    "place": "environment.location",
    "location": "environment.location",
    "building": "environment.location",
    "room": "environment.location",
    "environment": "environment.context",
    "atmosphere": "environment.context",
    "season": "environment.context",
    "weather": "environment.weather",
    # Actions
    "action": "action.movement",
    "movement": "action.movement",
    "activity": "action.movement",
    "gesture": "action.gesture",
    # Emotion
    "emotion": "subject.emotion",
    "expression": "subject.emotion",
    "mood": "style.aesthetic",
    # Cinematography
    "shot type": "shot.type",
    "camera movement": "camera.movement",
    "camera angle": "camera.angle",
    "camera lens": "camera.lens",
    "lens": "camera.lens",
    "focus": "camera.focus",
    "depth of field": "camera.focus",
    "style": "style.aesthetic",
    "aesthetic": "style.aesthetic",
    "film stock": "style.filmStock",
    "color grade": "style.colorGrade",
    "color": "style.colorGrade",
    # Lighting
    "lighting": "lighting.quality",
    "light source": "lighting.source",
    "time of day": "lighting.timeOfDay",
    "color temperature": "lighting.colorTemp",
    # Technical
    "frame rate": "technical.frameRate",
    "fps": "technical.frameRate",
    "duration": "technical.duration",
    "aspect ratio": "technical.aspectRatio",
    "resolution": "technical.resolution",
    # Audio
    "audio": "audio.ambient",
    "ambient sound": "audio.ambient",
    "sound effect": "audio.soundEffect",
    "music": "audio.score",
    "score": "audio.score",
}

DEFAULT_TAGGER_ROLE = "subject.identity"
DEFAULT_TAGGER_THRESHOLD = 0.3


def map_tagger_label(label: str, label_map: Mapping[str, str] = TAGGER_LABEL_MAP) -> str:
    return label_map.get(label.strip().lower(), DEFAULT_TAGGER_ROLE)


def calibrate_tagger_confidence(score: float, threshold: float = DEFAULT_TAGGER_THRESHOLD) -> float:
    """Map a tagger score in ``[threshold, 1]`` onto ``[0.5, 1]``.

    Scores at or below the threshold map to 0.5; ranking among accepted
    detections is preserved. Rounded to two decimals.
    """
    clamped = max(0.0, min(1.0, score))
    t = max(0.0, min(0.99, threshold))
    normalized = 0.0 if clamped <= t else (clamped - t) / (1 - t)
    return round(0.5 + normalized * 0.5, 2)


def candidates_from_tagger(
    detections: Iterable[Mapping[str, Any]],
    threshold: float = DEFAULT_TAGGER_THRESHOLD,
    label_map: Mapping[str, str] = TAGGER_LABEL_MAP,
) -> list[dict[str, Any]]:
    """Convert ``{text, label, score, start, end}`` detections to candidate dicts.

    Detections without a numeric score are passed through unscored; the
    candidate normaliser decides what to do with them.
    """
    candidates = []
    for det in detections:
        score = det.get("score")
        confidence: Any = score
        if isinstance(score, (int, float)) and not isinstance(score, bool):
            confidence = calibrate_tagger_confidence(float(score), threshold)
        candidates.append({
            "text": det.get("text", det.get("spanText")),
            "start": det.get("start"),
            "end": det.get("end"),
            "role": map_tagger_label(str(det.get("label", "")), label_map),
            "confidence": confidence,
            "source": "ml-tagger",
        })
    return candidates
