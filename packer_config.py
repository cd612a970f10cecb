import os

BASE_URL = os.environ.get("TRANSCRIPT_PACKER_BASE_URL", "https://mlp.fandom.com")
USER_AGENT = os.environ.get("TRANSCRIPT_PACKER_USER_AGENT", "Mozilla/5.0 (transcript-packer)")
REQUEST_TIMEOUT = float(os.environ.get("TRANSCRIPT_PACKER_TIMEOUT", "30"))

DEFAULT_MIN_SEASON = 1
DEFAULT_MAX_SEASON = 7
DEFAULT_OUT = "transcripts.json"
