"""
Transcript Service for Earnings Insight

Fetches the latest earnings-call transcript for a ticker and pulls out the
part worth scoring for sentiment: what senior executives said, favouring
closing remarks and Q&A over the scripted introduction.

Example Usage:
    transcripts = TranscriptService(client)
    record = await transcripts.fetch('AAPL')
    text = extract_key_statements(record)
"""

import json
import logging
from typing import Any, List, Optional

from ..errors import ParseError
from ..models.market import SpeakerTurn, TranscriptRecord
from .upstream_client import UpstreamClient

logger = logging.getLogger(__name__)

TRANSCRIPT_PATH = "/v1/earningstranscript"

# Roles whose statements drive the sentiment signal
EXECUTIVE_ROLES = ("Chief Executive Officer", "Chief Financial Officer", "Chairman")

# How many trailing executive statements to keep
MAX_EXECUTIVE_STATEMENTS = 3

# Size of the raw-transcript tail used when no executive turns qualify
FALLBACK_TAIL_CHARS = 1000


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def decode_transcript_split(raw: Any) -> Optional[List[Any]]:
    """
    Decode the speaker-turn sequence, which the provider may send as a JSON
    string. Anything undecodable becomes None.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Failed to parse transcript_split: {str(e)}")
            return None
    if isinstance(raw, list):
        return raw
    return None


def _to_turn(item: Any) -> Optional[SpeakerTurn]:
    if not isinstance(item, dict):
        return None
    role = item.get("role")
    text = item.get("text")
    speaker = item.get("speaker")
    return SpeakerTurn(
        speaker=speaker if isinstance(speaker, str) else None,
        role=role if isinstance(role, str) else "",
        text=text if isinstance(text, str) else None,
    )


def parse_transcript(payload: Any, ticker: Optional[str] = None) -> TranscriptRecord:
    """Build a TranscriptRecord from a provider payload without raising"""
    if not isinstance(payload, dict):
        payload = {}

    transcript_split = decode_transcript_split(payload.get("transcript_split"))
    turns = [turn for turn in map(_to_turn, transcript_split or []) if turn is not None]
    transcript = payload.get("transcript")
    date = payload.get("date")
    payload_ticker = payload.get("ticker")
    if isinstance(payload_ticker, (int, float)) and not isinstance(payload_ticker, bool):
        payload_ticker = str(payload_ticker)

    return TranscriptRecord(
        ticker=payload_ticker if isinstance(payload_ticker, str) and payload_ticker else ticker,
        quarter=_as_int(payload.get("quarter")),
        year=_as_int(payload.get("year")),
        date=str(date) if date is not None else None,
        transcript=transcript if isinstance(transcript, str) else None,
        transcript_split=transcript_split,
        turns=turns,
        participants=payload.get("participants"),
    )


def extract_key_statements(record: Optional[TranscriptRecord]) -> str:
    """
    Select the executive statements to analyse

    Returns:
        The last few CEO/CFO/Chairman statements joined by spaces, else the
        tail of the raw transcript, else an empty string
    """
    if record is None:
        return ""

    executive_turns = [
        turn for turn in record.turns
        if turn.text and any(role in turn.role for role in EXECUTIVE_ROLES)
    ]
    if len(executive_turns) > MAX_EXECUTIVE_STATEMENTS:
        executive_turns = executive_turns[-MAX_EXECUTIVE_STATEMENTS:]

    key_statements = " ".join(turn.text for turn in executive_turns)
    if key_statements:
        logger.debug(f"Extracted {len(key_statements)} characters from {len(executive_turns)} executive statements")
        return key_statements

    if record.transcript:
        logger.debug(f"Using transcript tail fallback, length: {len(record.transcript)}")
        return record.transcript[-FALLBACK_TAIL_CHARS:]

    logger.info("No suitable transcript data found")
    return ""


class TranscriptService:
    def __init__(self, client: UpstreamClient):
        self.client = client

    async def fetch(self, ticker: str) -> TranscriptRecord:
        """Fetch and parse the latest transcript, raising when unavailable"""
        logger.info(f"Fetching earnings transcript for {ticker}")
        result = await self.client.fetch(TRANSCRIPT_PATH, {"ticker": ticker})
        payload = result.unwrap()
        if not isinstance(payload, dict) or not payload:
            raise ParseError(f"No transcript payload for {ticker}")
        return parse_transcript(payload, ticker)
