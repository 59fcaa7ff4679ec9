from dataclasses import dataclass

from core import config


@dataclass(frozen=True)
class SessionTimings:
    countdown_tick_sec: float = config.COUNTDOWN_TICK_SEC
    perception_poll_sec: float = config.PERCEPTION_POLL_SEC
    detection_timeout_sec: float = config.DETECTION_TIMEOUT_SEC
    watchdog_interval_sec: float = config.WATCHDOG_INTERVAL_SEC
    watchdog_stall_sec: float = config.WATCHDOG_STALL_SEC
    shutdown_grace_sec: float = config.SHUTDOWN_GRACE_SEC
    question_timeout_sec: float = config.QUESTION_TIMEOUT_SEC
    submission_timeout_sec: float = config.SUBMISSION_TIMEOUT_SEC
    speech_restart_after_end_sec: float = 0.5
    speech_restart_after_error_sec: float = 1.0


DEFAULT_TIMINGS = SessionTimings()
