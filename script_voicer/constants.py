"""All magic numbers and configuration constants."""

API_URL = "https://api.minimax.chat/v1/t2a_v2"   # MiniMax text-to-audio endpoint
DEFAULT_MODEL = "speech-2.6-turbo"               # model used by the batch runner
ADAPTER_MODEL = "speech-01-turbo"                # fallback when synthesize() gets no model
VOICE_SPEED = 1.0
VOICE_VOLUME = 1.0
VOICE_PITCH = 0
AUDIO_SAMPLE_RATE = 32000                        # Hz
AUDIO_BITRATE = 128000                           # bits/s
AUDIO_FORMAT = "mp3"
AUDIO_CHANNELS = 1                               # mono
AUDIO_MIME_TYPE = "audio/mp3"
ENV_API_KEY = "MINIMAX_API_KEY"
ENV_GROUP_ID = "MINIMAX_GROUP_ID"
ENV_MODEL = "MINIMAX_MODEL"
ENV_API_URL = "MINIMAX_API_URL"
COL_SHOT = "Shot Number"
COL_CHARACTER = "Character"
COL_VOICE_ID = "voice_id"
COL_TEXT = "text"
COL_EMOTION = "emotion"
REQUIRED_COLUMNS = (COL_CHARACTER, COL_VOICE_ID, COL_TEXT)
OUTPUT_DIR = "output"
MANIFEST_NAME = "output.json"
UNKNOWN_ERROR = "Unknown error"
VERSION = "0.1.0"
