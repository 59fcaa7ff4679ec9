from interview_sim.speech.capture import SpeechCapture, SpeechToTextProvider, TranscriptListener

__all__ = ["SpeechCapture", "SpeechToTextProvider", "TranscriptListener"]
