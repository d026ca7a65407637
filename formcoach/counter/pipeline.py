from __future__ import annotations
import logging
import threading
import time
from typing import Callable, Optional

import cv2

from formcoach.counter.landmarks import Frame
from formcoach.counter.session import RepSessionManager

logger = logging.getLogger(__name__)


class PosePipeline(threading.Thread):
    """Webcam -> MediaPipe Pose -> Frame -> RepSessionManager.handle_frame."""

    def __init__(
            self,
            manager: RepSessionManager,
            camera_index: int = 0,
            show_window: bool = False,
            on_error: Optional[Callable[[str], None]] = None,
    ):
        super().__init__(daemon=True)
        self.manager = manager
        self.camera_index = camera_index
        self.show_window = show_window
        self.on_error = on_error
        self._stop_evt = threading.Event()
        self.cap = None
        self.pose = None

    def run(self):
        try:
            import mediapipe as mp
            mp_pose = mp.solutions.pose
            mp_drawing = mp.solutions.drawing_utils

            self.cap = cv2.VideoCapture(self.camera_index)
            if not self.cap.isOpened():
                raise RuntimeError("Webcam not available")

            self.pose = mp_pose.Pose(min_detection_confidence=0.5, min_tracking_confidence=0.5)

            if self.show_window:
                try:
                    cv2.namedWindow("Workout", cv2.WINDOW_NORMAL)
                except cv2.error:
                    logger.warning("preview window unavailable, running headless")
                    self.show_window = False

            while not self._stop_evt.is_set():
                ok, image = self.cap.read()
                if not ok:
                    time.sleep(0.01)
                    continue
                res = self.pose.process(cv2.cvtColor(image, cv2.COLOR_BGR2RGB))
                frame = Frame.from_mediapipe(res.pose_landmarks, ts=time.time())
                self.manager.handle_frame(frame)

                if self.show_window:
                    self._draw(image, res, mp_pose, mp_drawing)
                    # macOS: imshow requires waitKey even if we ignore keys
                    if cv2.waitKey(1) & 0xFF == ord("q"):
                        self._stop_evt.set()
        except Exception as e:
            logger.exception("pose pipeline stopped")
            if self.on_error:
                self.on_error(str(e))
        finally:
            if self.cap is not None:
                self.cap.release()
            if self.pose is not None:
                self.pose.close()
            if self.show_window:
                cv2.destroyAllWindows()

    def _draw(self, image, res, mp_pose, mp_drawing):
        if res.pose_landmarks:
            mp_drawing.draw_landmarks(image, res.pose_landmarks, mp_pose.POSE_CONNECTIONS)
        snap = self.manager.snapshot()
        cv2.putText(image, f"Reps: {snap.rep_count}  Good: {snap.good_rep_count}  Stage: {snap.stage}",
                    (20, 40), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (0, 255, 0), 2)
        if snap.exercise == "plank":
            cv2.putText(image, f"Hold: {snap.hold_timer}s", (20, 75),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.8, (0, 255, 255), 2)
        for i, msg in enumerate(snap.feedback):
            cv2.putText(image, msg, (20, 110 + 30 * i), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 0, 255), 2)
        cv2.imshow("Workout", image)

    def stop(self):
        self._stop_evt.set()
