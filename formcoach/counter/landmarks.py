from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Optional, Sequence, Tuple

from formcoach.counter.pose_core import angle_3pt

NUM_LANDMARKS = 33


class PoseLandmark(IntEnum):
    """MediaPipe Pose landmark indices (same numbering as mp.solutions.pose.PoseLandmark)."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


Triple = Tuple[PoseLandmark, PoseLandmark, PoseLandmark]


@dataclass(frozen=True)
class Landmark:
    x: float = 0.0
    y: float = 0.0
    visibility: Optional[float] = None

    @property
    def point(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Frame:
    """One detection: all 33 landmarks at timestamp ts (seconds).

    A tick without a detected person is passed around as ``None`` rather than
    as a Frame.
    """
    landmarks: Tuple[Landmark, ...]
    ts: float

    def __post_init__(self):
        if len(self.landmarks) != NUM_LANDMARKS:
            raise ValueError(f"frame needs {NUM_LANDMARKS} landmarks, got {len(self.landmarks)}")

    def __getitem__(self, idx: int) -> Landmark:
        return self.landmarks[idx]

    def point(self, idx: int) -> Tuple[float, float]:
        return self.landmarks[idx].point

    def angle(self, triple: Triple) -> float:
        a, b, c = triple
        return angle_3pt(self.point(a), self.point(b), self.point(c))

    @classmethod
    def from_points(
        cls,
        points: Sequence[Sequence[float]],
        ts: float,
        visibility: Optional[Sequence[Optional[float]]] = None,
    ) -> "Frame":
        """Build a frame from (x, y) pairs, optionally with per-point visibility."""
        vis: Iterable[Optional[float]] = visibility if visibility is not None else [None] * len(points)
        lms = tuple(Landmark(float(p[0]), float(p[1]), v) for p, v in zip(points, vis))
        if len(lms) != len(points):
            raise ValueError("visibility must have one entry per point")
        return cls(landmarks=lms, ts=float(ts))

    @classmethod
    def from_mediapipe(cls, pose_landmarks, ts: float) -> Optional["Frame"]:
        """Convert ``results.pose_landmarks`` into a Frame; None when nobody was detected."""
        if not pose_landmarks:
            return None
        lm = pose_landmarks.landmark
        return cls(
            landmarks=tuple(Landmark(p.x, p.y, getattr(p, "visibility", None)) for p in lm),
            ts=float(ts),
        )
