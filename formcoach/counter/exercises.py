from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from formcoach.counter.landmarks import Frame, PoseLandmark as P, Triple
from formcoach.counter.pose_core import Rule, combine_angles
from formcoach.counter.state import FormFlag

# Landmark triples (a, vertex, c)
LEFT_ELBOW = (P.LEFT_SHOULDER, P.LEFT_ELBOW, P.LEFT_WRIST)
RIGHT_ELBOW = (P.RIGHT_SHOULDER, P.RIGHT_ELBOW, P.RIGHT_WRIST)
LEFT_KNEE = (P.LEFT_HIP, P.LEFT_KNEE, P.LEFT_ANKLE)
RIGHT_KNEE = (P.RIGHT_HIP, P.RIGHT_KNEE, P.RIGHT_ANKLE)
LEFT_SHOULDER = (P.LEFT_HIP, P.LEFT_SHOULDER, P.LEFT_ELBOW)
RIGHT_SHOULDER = (P.RIGHT_HIP, P.RIGHT_SHOULDER, P.RIGHT_ELBOW)
LEFT_HIP = (P.LEFT_SHOULDER, P.LEFT_HIP, P.LEFT_KNEE)
RIGHT_HIP = (P.RIGHT_SHOULDER, P.RIGHT_HIP, P.RIGHT_KNEE)
LEFT_BODY_LINE = (P.LEFT_SHOULDER, P.LEFT_HIP, P.LEFT_ANKLE)
RIGHT_BODY_LINE = (P.RIGHT_SHOULDER, P.RIGHT_HIP, P.RIGHT_ANKLE)

GOOD_REP = "Good rep!"


def _check_triples(triples: Tuple[Triple, ...]):
    if not 1 <= len(triples) <= 2:
        raise ValueError("expected one or two landmark triples")


@dataclass(frozen=True)
class AngleBand:
    """An angle (combined over sides) that must stay within [low, high]."""
    triples: Tuple[Triple, ...]
    low: float
    high: float
    rule: Rule = "max"

    def __post_init__(self):
        _check_triples(self.triples)
        if self.low > self.high:
            raise ValueError("band low bound above high bound")

    def measure(self, frame: Frame) -> float:
        return combine_angles((frame.angle(t) for t in self.triples), self.rule)

    def contains(self, angle: float) -> bool:
        return self.low <= angle <= self.high


@dataclass(frozen=True)
class PostureCheck:
    band: AngleBand
    cue: str


@dataclass(frozen=True)
class RepConfig:
    """Hysteresis setup for one repetition exercise.

    The relaxed pair (rest_angle, peak_angle) drives stage changes and a rest
    crossing marks the cycle fully returned. strict_peak_angle lies beyond the
    peak threshold and only decides whether a counted rep reached full depth.
    """
    exercise: str
    triples: Tuple[Triple, ...]
    rest_angle: float
    peak_angle: float
    strict_peak_angle: float
    cooldown_ms: int = 350
    rule: Rule = "min"
    # Direction: True=angle decreases toward the working extreme (e.g., curls), False=increases
    concentric_angle_down: bool = True
    posture: Optional[PostureCheck] = None
    depth_cue: str = "Go a bit deeper"
    rest_cue: str = "Return fully to the start position"
    good_cue: str = GOOD_REP

    def __post_init__(self):
        _check_triples(self.triples)
        if self.concentric_angle_down:
            ok = self.strict_peak_angle <= self.peak_angle < self.rest_angle
        else:
            ok = self.rest_angle < self.peak_angle <= self.strict_peak_angle
        if not ok:
            raise ValueError(f"{self.exercise}: strict peak must lie at or beyond the relaxed peak")

    @property
    def required_flags(self) -> frozenset:
        flags = {FormFlag.FULLY_RETURNED, FormFlag.DEPTH_OK}
        if self.posture is not None:
            flags.add(FormFlag.POSTURE_OK)
        return frozenset(flags)

    def missing_cues(self, flags) -> List[str]:
        """Corrective cues for the required flags a counted rep did not earn."""
        cues = []
        if FormFlag.FULLY_RETURNED not in flags:
            cues.append(self.rest_cue)
        if FormFlag.DEPTH_OK not in flags:
            cues.append(self.depth_cue)
        if self.posture is not None and FormFlag.POSTURE_OK not in flags:
            cues.append(self.posture.cue)
        return cues

    def measure(self, frame: Frame) -> float:
        return combine_angles((frame.angle(t) for t in self.triples), self.rule)

    def _beyond(self, angle: float, threshold: float, toward_peak: bool) -> bool:
        low_side = self.concentric_angle_down == toward_peak
        return angle < threshold if low_side else angle > threshold

    def past_rest(self, angle: float) -> bool:
        return self._beyond(angle, self.rest_angle, toward_peak=False)

    def past_peak(self, angle: float) -> bool:
        return self._beyond(angle, self.peak_angle, toward_peak=True)

    def past_strict_peak(self, angle: float) -> bool:
        return self._beyond(angle, self.strict_peak_angle, toward_peak=True)


@dataclass(frozen=True)
class HoldConfig:
    """Isometric exercise judged by a body-line angle staying inside a band."""
    exercise: str
    band: AngleBand
    hold_cue: str = "Good form! Hold it."
    correct_cue: str = "Straighten your back!"


ExerciseConfig = Union[RepConfig, HoldConfig]

EXERCISES: Dict[str, ExerciseConfig] = {
    cfg.exercise: cfg
    for cfg in (
        RepConfig(
            exercise="bicep_curl", triples=(LEFT_ELBOW, RIGHT_ELBOW),
            rest_angle=150, peak_angle=50, strict_peak_angle=40,
            cooldown_ms=350, depth_cue="Curl all the way up",
            rest_cue="Straighten your arms fully",
        ),
        RepConfig(
            exercise="squats", triples=(LEFT_KNEE, RIGHT_KNEE),
            rest_angle=165, peak_angle=90, strict_peak_angle=80,
            cooldown_ms=450, depth_cue="Go a bit deeper", rest_cue="Stand up tall",
        ),
        RepConfig(
            exercise="pushups", triples=(LEFT_ELBOW, RIGHT_ELBOW),
            rest_angle=160, peak_angle=90, strict_peak_angle=80,
            cooldown_ms=450, depth_cue="Lower your chest further",
            rest_cue="Push all the way up",
            posture=PostureCheck(
                band=AngleBand(triples=(LEFT_BODY_LINE, RIGHT_BODY_LINE), low=150, high=210),
                cue="Keep your back straight!",
            ),
        ),
        RepConfig(
            exercise="lunges", triples=(LEFT_KNEE, RIGHT_KNEE),
            rest_angle=160, peak_angle=100, strict_peak_angle=90,
            cooldown_ms=500, depth_cue="Drop your back knee lower",
        ),
        RepConfig(
            exercise="overhead_press", triples=(LEFT_ELBOW, RIGHT_ELBOW),
            rest_angle=90, peak_angle=160, strict_peak_angle=170,
            cooldown_ms=350, concentric_angle_down=False, depth_cue="Lock out your arms overhead",
        ),
        RepConfig(
            exercise="lateral_raises", triples=(LEFT_SHOULDER, RIGHT_SHOULDER), rule="max",
            rest_angle=30, peak_angle=80, strict_peak_angle=90,
            cooldown_ms=500, concentric_angle_down=False, depth_cue="Raise your arms to shoulder height",
        ),
        RepConfig(
            exercise="pullups", triples=(LEFT_ELBOW, RIGHT_ELBOW),
            rest_angle=150, peak_angle=70, strict_peak_angle=60,
            cooldown_ms=500, depth_cue="Pull your chin over the bar",
            rest_cue="Lower until your arms are straight",
        ),
        RepConfig(
            exercise="glute_bridges", triples=(LEFT_HIP, RIGHT_HIP), rule="max",
            rest_angle=120, peak_angle=160, strict_peak_angle=170,
            cooldown_ms=500, concentric_angle_down=False, depth_cue="Push your hips higher",
        ),
        RepConfig(
            exercise="crunches", triples=(LEFT_HIP, RIGHT_HIP),
            rest_angle=130, peak_angle=100, strict_peak_angle=90,
            cooldown_ms=400, depth_cue="Curl up a little more",
        ),
        HoldConfig(
            exercise="plank",
            band=AngleBand(triples=(RIGHT_BODY_LINE,), low=155, high=205),
        ),
    )
}


def get_config(exercise: Optional[str]) -> Optional[ExerciseConfig]:
    if exercise is None:
        return None
    return EXERCISES.get(exercise)
