"""Speech synthesis via the MiniMax t2a_v2 HTTP API.

One POST per call, never streamed. The service reports failures two ways
(HTTP status and ``base_resp.status_code`` in a 200 body) and returns audio in
one of two shapes (hex string in ``data.audio`` or a URL in
``data.audio_file``). Everything here turns those into a single AudioResource
or a SynthesisError subclass.
"""

import logging
import re

import httpx

from script_voicer.config import Credentials
from script_voicer.constants import (
    ADAPTER_MODEL,
    API_URL,
    AUDIO_BITRATE,
    AUDIO_CHANNELS,
    AUDIO_FORMAT,
    AUDIO_MIME_TYPE,
    AUDIO_SAMPLE_RATE,
    DEFAULT_MODEL,
    VOICE_PITCH,
    VOICE_SPEED,
    VOICE_VOLUME,
)
from script_voicer.errors import (
    DecodeError,
    NoAudioDataError,
    SecondaryFetchError,
    ServiceError,
    TransportError,
)
from script_voicer.models import AudioResource, InlineAudio, RemoteAudio, ScriptRow

logger = logging.getLogger(__name__)

_HEX_PAIRS_RE = re.compile(r"\A(?:[0-9a-fA-F]{2})*\Z")


def build_payload(text: str, voice_id: str, model: str = ADAPTER_MODEL) -> dict:
    """Request body for a single non-streamed synthesis call."""
    return {
        "model": model,
        "text": text,
        "stream": False,
        "voice_setting": {
            "voice_id": voice_id,
            "speed": VOICE_SPEED,
            "vol": VOICE_VOLUME,
            "pitch": VOICE_PITCH,
        },
        "audio_setting": {
            "sample_rate": AUDIO_SAMPLE_RATE,
            "bitrate": AUDIO_BITRATE,
            "format": AUDIO_FORMAT,
            "channel": AUDIO_CHANNELS,
        },
    }


def build_headers(credentials: Credentials) -> dict:
    return {
        "Authorization": f"Bearer {credentials.api_key}",
        "Content-Type": "application/json",
    }


def decode_hex_audio(hex_audio) -> bytes:
    """Decode contiguous two-digit hex pairs into raw bytes.

    Odd lengths, separators, whitespace and non-hex characters are rejected
    rather than guessed at.
    """
    if not isinstance(hex_audio, str) or not _HEX_PAIRS_RE.match(hex_audio):
        preview = repr(hex_audio)[:40]
        raise DecodeError(f"Malformed hex audio payload: {preview}")
    return bytes.fromhex(hex_audio)


def parse_response(body) -> InlineAudio | RemoteAudio:
    """Classify a decoded JSON body into one of the two audio shapes.

    Raises ServiceError for a non-zero ``base_resp.status_code`` (or a body
    without ``base_resp``), DecodeError for bad inline audio, and
    NoAudioDataError when neither shape is present.
    """
    if not isinstance(body, dict) or not isinstance(body.get("base_resp"), dict):
        raise ServiceError(None, "Malformed response: missing base_resp")

    base_resp = body["base_resp"]
    status_code = base_resp.get("status_code")
    if status_code != 0:
        status_msg = base_resp.get("status_msg") or f"status code {status_code}"
        raise ServiceError(status_code, status_msg)

    data = body.get("data")
    if not isinstance(data, dict):
        raise NoAudioDataError()

    audio = data.get("audio")
    if audio:
        return InlineAudio(data=decode_hex_audio(audio))

    audio_file = data.get("audio_file")
    if isinstance(audio_file, str) and audio_file.strip():
        return RemoteAudio(url=audio_file.strip())

    raise NoAudioDataError()


async def fetch_remote_audio(client: httpx.AsyncClient, url: str) -> AudioResource:
    """Download the audio the service parked at ``url``."""
    try:
        response = await client.get(url, follow_redirects=True)
    except httpx.RequestError as e:
        raise SecondaryFetchError(url, str(e) or type(e).__name__) from e

    if not response.is_success:
        raise SecondaryFetchError(url, response.reason_phrase, status_code=response.status_code)

    content_type = response.headers.get("content-type", "").split(";")[0].strip()
    return AudioResource(data=response.content, mime_type=content_type or AUDIO_MIME_TYPE)


async def resolve_audio(payload: InlineAudio | RemoteAudio, client: httpx.AsyncClient) -> AudioResource:
    if isinstance(payload, InlineAudio):
        return AudioResource(data=payload.data, mime_type=AUDIO_MIME_TYPE)
    return await fetch_remote_audio(client, payload.url)


async def synthesize(
    text: str,
    voice_id: str,
    credentials: Credentials,
    model: str = ADAPTER_MODEL,
    *,
    client: httpx.AsyncClient | None = None,
    api_url: str = API_URL,
) -> AudioResource:
    """Synthesize ``text`` with ``voice_id`` and return the decoded audio.

    Opens a short-lived httpx.AsyncClient when ``client`` is not given. No
    retries and no timeout override: the caller decides what to do with a
    failure.
    """
    if client is None:
        async with httpx.AsyncClient() as owned_client:
            return await synthesize(
                text, voice_id, credentials, model,
                client=owned_client, api_url=api_url,
            )

    payload = build_payload(text, voice_id, model)
    try:
        response = await client.post(
            api_url,
            params={"GroupId": credentials.group_id},
            json=payload,
            headers=build_headers(credentials),
        )
    except httpx.RequestError as e:
        logger.warning("Synthesis request failed: %s", e)
        raise TransportError(None, str(e) or type(e).__name__) from e

    if not response.is_success:
        logger.warning("Synthesis API returned %s %s", response.status_code, response.reason_phrase)
        raise TransportError(response.status_code, response.reason_phrase)

    try:
        body = response.json()
    except ValueError as e:
        raise ServiceError(None, "Malformed response: body is not JSON") from e

    audio = parse_response(body)
    if isinstance(audio, RemoteAudio):
        logger.debug("Fetching audio file for voice %s from %s", voice_id, audio.url)
    return await resolve_audio(audio, client)


class SynthesisClient:
    """Credentials, model and transport bundled once for a whole batch."""

    def __init__(
        self,
        credentials: Credentials,
        model: str = DEFAULT_MODEL,
        api_url: str = API_URL,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.credentials = credentials
        self.model = model
        self.api_url = api_url
        self.http_client = http_client

    async def synthesize(self, row: ScriptRow) -> AudioResource:
        return await synthesize(
            row.text,
            row.voice_id,
            self.credentials,
            self.model,
            client=self.http_client,
            api_url=self.api_url,
        )
