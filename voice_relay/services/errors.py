class RecordingPipelineError(Exception):
    """A step of the recording pipeline (download, transcription, summary) failed."""

    def __init__(self, step: str, status_code: int, body: str):
        self.step = step
        self.status_code = status_code
        self.body = body
        super().__init__(f"{step} failed {status_code}: {body}")
